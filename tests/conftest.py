"""Shared pytest fixtures for tests."""

from pathlib import Path

import pytest

from dgen.code.graph import CodeTree
from dgen.code.unit import CodeUnit
from dgen.config import Settings

ENTRY_SOURCE = """/*
 * Application entry
 *
 * Starts the service and wires the helpers.
 */

const b = require("./b.js");
const helper = b.helper;

// Start the service
function start(port) {
\treturn helper(port);
}

module.exports = start;
"""

HELPERS_SOURCE = """// Helpers

/**
 * Format a port
 */
function helper(port) {
\treturn "port " + port;
}

class Server extends Base {
\tconstructor(port) {
\t\tthis.port = port;
\t}

\t// Listen on the port
\tlisten() {
\t\treturn true;
\t}
}

module.exports.helper = helper;
module.exports.Server = Server;
"""

STANDALONE_SOURCE = """// Standalone utility
function noop() {}
"""


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    """Create a temporary directory for tests."""
    return tmp_path


@pytest.fixture
def project_dir(temp_dir: Path) -> Path:
    """Create a small JavaScript project.

    Structure:
    - a.js (requires ./b.js)
    - b.js
    - lib/c.js
    - node_modules/dep.js (filtered)
    - .cache/old.js (filtered)
    - notes.txt (filtered)
    """
    (temp_dir / "a.js").write_text(ENTRY_SOURCE)
    (temp_dir / "b.js").write_text(HELPERS_SOURCE)
    (temp_dir / "lib").mkdir()
    (temp_dir / "lib" / "c.js").write_text(STANDALONE_SOURCE)
    (temp_dir / "node_modules").mkdir()
    (temp_dir / "node_modules" / "dep.js").write_text("module.exports = 1;\n")
    (temp_dir / ".cache").mkdir()
    (temp_dir / ".cache" / "old.js").write_text("var old = 1;\n")
    (temp_dir / "notes.txt").write_text("not code\n")
    return temp_dir


@pytest.fixture
def entry_unit() -> CodeUnit:
    """Parsed entry file."""
    return CodeUnit(ENTRY_SOURCE, 1, "a.js")


@pytest.fixture
def helpers_unit() -> CodeUnit:
    """Parsed helpers file."""
    return CodeUnit(HELPERS_SOURCE, 1, "b.js")


@pytest.fixture
def linked_graph(entry_unit: CodeUnit, helpers_unit: CodeUnit) -> CodeTree:
    """Graph holding the entry file and the helpers it requires."""
    graph = CodeTree()
    graph.link(entry_unit)
    graph.link(helpers_unit)
    return graph


@pytest.fixture
def settings() -> Settings:
    """Default settings."""
    return Settings()
