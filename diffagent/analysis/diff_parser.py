"""
Diff parser module.

Parses unified diff format into structured records:
- One FileChange per file, in order of appearance
- Hunks with their header numbers and raw prefixed lines
- Added/removed line counts per file

The parser is permissive. Unrecognized lines are skipped and it never
raises, so patches produced by different tools can be fed in as-is.
"""

import re
import logging
from typing import List, Dict, Any, Optional
from dataclasses import dataclass, field, asdict
from enum import Enum

logger = logging.getLogger(__name__)

DEV_NULL = "/dev/null"

# Lines after a `diff --git` header searched for `rename from`
RENAME_LOOKAHEAD = 4


class FileStatus(str, Enum):
    """Status of a file within a diff."""
    ADDED = "added"
    DELETED = "deleted"
    MODIFIED = "modified"
    RENAMED = "renamed"


@dataclass
class DiffHunk:
    """Represents a hunk (continuous block of changes) in a diff."""
    old_start: int
    old_count: int
    new_start: int
    new_count: int
    lines: List[str] = field(default_factory=list)
    header: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class FileChange:
    """Represents all changes to a single file."""
    old_path: str
    new_path: str
    status: FileStatus
    hunks: List[DiffHunk] = field(default_factory=list)
    additions: int = 0
    deletions: int = 0

    @property
    def path(self) -> str:
        """Path that best identifies the file (new path unless deleted)."""
        if self.new_path and self.new_path != DEV_NULL:
            return self.new_path
        return self.old_path

    def to_dict(self) -> Dict[str, Any]:
        return {
            "old_path": self.old_path,
            "new_path": self.new_path,
            "status": self.status.value,
            "hunks": [hunk.to_dict() for hunk in self.hunks],
            "additions": self.additions,
            "deletions": self.deletions,
        }


@dataclass
class ParsedDiff:
    """Ordered collection of file changes parsed from one diff text."""
    files: List[FileChange] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"files": [f.to_dict() for f in self.files]}


class DiffParser:
    """
    Parses unified diff format.

    Single pass over the input lines, tracking the file and hunk
    currently being filled.
    """

    # Regex patterns for unified diff parsing
    FILE_HEADER_PATTERN = re.compile(r'^diff --git a/(.+?) b/(.+?)$')
    NEW_FILE_PATTERN = re.compile(r'^\+\+\+ b/(.+?)$')
    OLD_FILE_PATTERN = re.compile(r'^--- a/(.+?)$')
    HUNK_HEADER_PATTERN = re.compile(r'^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@(.*)$')

    def parse(self, diff_text: str) -> ParsedDiff:
        """
        Parse unified diff into structured format.

        Args:
            diff_text: Unified diff string

        Returns:
            ParsedDiff: Parsed files, possibly empty
        """
        if not diff_text or not isinstance(diff_text, str):
            logger.debug("Empty or non-text diff provided")
            return ParsedDiff()

        # Lines end at \n only; changed content may hold other line separators
        lines = [line[:-1] if line.endswith('\r') else line for line in diff_text.split('\n')]
        files: List[FileChange] = []
        current_file: Optional[FileChange] = None
        current_hunk: Optional[DiffHunk] = None

        for i, line in enumerate(lines):
            # Start of a new file diff
            match = self.FILE_HEADER_PATTERN.match(line)
            if match:
                if current_file:
                    files.append(current_file)
                status = self._determine_status(lines, i)
                old_path, new_path = match.group(1), match.group(2)
                if status == FileStatus.ADDED:
                    old_path = DEV_NULL
                elif status == FileStatus.DELETED:
                    new_path = DEV_NULL
                current_file = FileChange(
                    old_path=old_path,
                    new_path=new_path,
                    status=status,
                )
                current_hunk = None
                continue

            # Added file in a diff without a `diff --git` header
            if current_file is None and line.startswith('+++ b/'):
                match = self.NEW_FILE_PATTERN.match(line)
                if match:
                    current_file = FileChange(
                        old_path=DEV_NULL,
                        new_path=match.group(1),
                        status=FileStatus.ADDED,
                    )
                continue

            # Deleted file in a diff without a `diff --git` header
            if (
                current_file is None
                and line.startswith('--- a/')
                and i + 1 < len(lines)
                and lines[i + 1].startswith('+++ /dev/null')
            ):
                match = self.OLD_FILE_PATTERN.match(line)
                if match:
                    current_file = FileChange(
                        old_path=match.group(1),
                        new_path=DEV_NULL,
                        status=FileStatus.DELETED,
                    )
                continue

            if current_file is None:
                continue

            # Hunk header
            match = self.HUNK_HEADER_PATTERN.match(line)
            if match:
                current_hunk = DiffHunk(
                    old_start=int(match.group(1)),
                    old_count=int(match.group(2)) if match.group(2) else 1,
                    new_start=int(match.group(3)),
                    new_count=int(match.group(4)) if match.group(4) else 1,
                    header=match.group(5).strip(),
                )
                current_file.hunks.append(current_hunk)
                continue

            # Hunk content
            if current_hunk is None:
                continue

            if line.startswith('+++') or line.startswith('---'):
                continue

            if line.startswith('+'):
                current_hunk.lines.append(line)
                current_file.additions += 1
            elif line.startswith('-'):
                current_hunk.lines.append(line)
                current_file.deletions += 1
            elif line.startswith(' '):
                current_hunk.lines.append(line)

        # Add last file
        if current_file:
            files.append(current_file)

        parsed = ParsedDiff(files=files)
        logger.info("Parsed diff", extra=self.get_stats(parsed))
        return parsed

    def _determine_status(self, lines: List[str], index: int) -> FileStatus:
        """
        Determine file status from the lines around a `diff --git` header.

        Only the nearest markers are inspected; anything else is MODIFIED.
        """
        end = min(index + 1 + RENAME_LOOKAHEAD, len(lines))
        for line in lines[index + 1:end]:
            if line.startswith('rename from '):
                return FileStatus.RENAMED

        if index > 0 and lines[index - 1].startswith('new file mode'):
            return FileStatus.ADDED

        if index + 1 < len(lines) and lines[index + 1].startswith('deleted file mode'):
            return FileStatus.DELETED

        return FileStatus.MODIFIED

    def get_stats(self, parsed: ParsedDiff) -> Dict[str, int]:
        """
        Get totals for a parsed diff.

        Returns:
            Dict with total_files, total_additions and total_deletions
        """
        if parsed is None:
            return {"total_files": 0, "total_additions": 0, "total_deletions": 0}

        return {
            "total_files": len(parsed.files),
            "total_additions": sum(f.additions for f in parsed.files),
            "total_deletions": sum(f.deletions for f in parsed.files),
        }

    def get_added_lines(self, file_change: FileChange) -> List[str]:
        """Bodies of all added lines, marker stripped."""
        return [
            line[1:]
            for hunk in file_change.hunks
            for line in hunk.lines
            if line.startswith('+')
        ]

    def get_removed_lines(self, file_change: FileChange) -> List[str]:
        """Bodies of all removed lines, marker stripped."""
        return [
            line[1:]
            for hunk in file_change.hunks
            for line in hunk.lines
            if line.startswith('-')
        ]
