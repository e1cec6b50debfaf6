"""Shared test fixtures for DiffAgent."""

from typing import Iterable

import pytest

from diffagent.analysis.diff_parser import DiffHunk, FileChange, FileStatus


SIMPLE_DIFF = """\
diff --git a/test.js b/test.js
index abc..def 100644
--- a/test.js
+++ b/test.js
@@ -1,3 +1,4 @@
 function hello() {
-  console.log('Hello');
+  console.log('Hello World');
 }
+// New comment
"""

NEW_FILE_DIFF = """\
new file mode 100644
diff --git a/newfile.ts b/newfile.ts
index 0000000..1234567
+++ b/newfile.ts
@@ -0,0 +1,3 @@
+export function greet(name: string): string {
+  return `Hello ${name}`;
+}
"""

BUG_FIX_DIFF = """\
diff --git a/src/api.js b/src/api.js
index 1111111..2222222 100644
--- a/src/api.js
+++ b/src/api.js
@@ -10,2 +10,4 @@ function load(data) {
 function load(data) {
+  // fix: null check before access
+  if (data === null) return;
 }
"""

CONTEXT_ONLY_DIFF = """\
diff --git a/README.md b/README.md
index 3333333..4444444 100644
--- a/README.md
+++ b/README.md
@@ -1,2 +1,2 @@
 # Title
 Some text
"""

DELETED_FILE_DIFF = """\
diff --git a/old.py b/old.py
deleted file mode 100644
index 1234567..0000000
--- a/old.py
+++ /dev/null
@@ -1,2 +0,0 @@
-def legacy():
-    return 1
"""

RENAMED_FILE_DIFF = """\
diff --git a/a.py b/b.py
similarity index 100%
rename from a.py
rename to b.py
"""

GO_HANDLER_DIFF = """\
diff --git a/server.go b/server.go
index 5555555..6666666 100644
--- a/server.go
+++ b/server.go
@@ -1,3 +1,7 @@
 package main
+
+func handleHealth(w http.ResponseWriter, r *http.Request) {
+\tw.WriteHeader(200)
+}
"""

MULTI_FILE_DIFF = SIMPLE_DIFF + BUG_FIX_DIFF + CONTEXT_ONLY_DIFF


@pytest.fixture
def simple_diff() -> str:
    return SIMPLE_DIFF


@pytest.fixture
def new_file_diff() -> str:
    return NEW_FILE_DIFF


@pytest.fixture
def bug_fix_diff() -> str:
    return BUG_FIX_DIFF


@pytest.fixture
def context_only_diff() -> str:
    return CONTEXT_ONLY_DIFF


@pytest.fixture
def multi_file_diff() -> str:
    return MULTI_FILE_DIFF


@pytest.fixture
def make_file():
    """Factory for a FileChange with a single hunk."""

    def _make(
        path: str,
        added: Iterable[str] = (),
        removed: Iterable[str] = (),
        context: Iterable[str] = (),
        status: FileStatus = FileStatus.MODIFIED,
    ) -> FileChange:
        added = list(added)
        removed = list(removed)
        context = list(context)
        lines = (
            [f" {line}" for line in context]
            + [f"-{line}" for line in removed]
            + [f"+{line}" for line in added]
        )
        hunk = DiffHunk(
            old_start=1,
            old_count=len(context) + len(removed),
            new_start=1,
            new_count=len(context) + len(added),
            lines=lines,
        )
        return FileChange(
            old_path=path,
            new_path=path,
            status=status,
            hunks=[hunk],
            additions=len(added),
            deletions=len(removed),
        )

    return _make


@pytest.fixture
def deleted_file_diff() -> str:
    return DELETED_FILE_DIFF


@pytest.fixture
def renamed_file_diff() -> str:
    return RENAMED_FILE_DIFF


@pytest.fixture
def go_handler_diff() -> str:
    return GO_HANDLER_DIFF
