"""Generated source file buffer and all-or-nothing artifact writing."""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from stylegen.core.errors import GenerationIOError


@dataclass
class ProjectInfo:
    """Stamped into the banner of every generated file."""

    name: str = 'stylegen'
    source: str = ''


class SourceFile:
    """In-memory C++ file with include and namespace bookkeeping.

    Nothing touches disk here; render() returns the text and closes any
    namespace that is still open.
    """

    def __init__(self, path: str, project: ProjectInfo):
        self.path = path
        self.project = project
        self.is_header = path.endswith('.h')
        self._chunks: list[str] = []
        self._namespaces: list[str] = []

    def write(self, text: str) -> SourceFile:
        self._chunks.append(text)
        return self

    def newline(self) -> SourceFile:
        return self.write('\n')

    def include(self, header: str) -> SourceFile:
        return self.write(f'#include "{header}"\n')

    def push_namespace(self, name: str = '') -> SourceFile:
        self._namespaces.append(name)
        return self.write(f'namespace {name} {{\n' if name else 'namespace {\n')

    def pop_namespace(self) -> SourceFile:
        name = self._namespaces.pop()
        return self.write(f'}} // namespace {name}\n' if name else '} // namespace\n')

    def _banner(self) -> str:
        lines = [
            '/*',
            'WARNING! All changes made in this file will be lost!',
            f"Created from '{self.project.source}' by '{self.project.name}'",
            '*/',
        ]
        if self.is_header:
            lines.append('#pragma once')
        return '\n'.join(lines) + '\n\n'

    def render(self) -> str:
        while self._namespaces:
            self.pop_namespace()
        return self._banner() + ''.join(self._chunks)


def read_existing(path: str) -> bytes | None:
    try:
        return Path(path).read_bytes()
    except FileNotFoundError:
        return None
    except OSError as e:
        raise GenerationIOError(path, e) from e


def _restore(path: str, previous: bytes | None) -> None:
    if previous is None:
        if os.path.exists(path):
            os.remove(path)
    else:
        Path(path).write_bytes(previous)


def write_artifacts(artifacts: dict[str, bytes]) -> dict[str, bool]:
    """Write every artifact or none of them.

    Files whose content is already byte-identical are left alone. The rest
    are staged as temp files beside their targets and only renamed into
    place once all of them were written. If a rename fails, targets already
    replaced get their previous content back (or are removed when they did
    not exist before). Returns path -> written flag.
    """
    result: dict[str, bool] = {}
    staged: list[tuple[str, str]] = []
    previous: dict[str, bytes | None] = {}
    try:
        for path, content in artifacts.items():
            existing = read_existing(path)
            if existing == content:
                result[path] = False
                continue
            directory = os.path.dirname(os.path.abspath(path))
            try:
                os.makedirs(directory, exist_ok=True)
                fd, tmp = tempfile.mkstemp(prefix='.stylegen-', dir=directory)
                with os.fdopen(fd, 'wb') as f:
                    f.write(content)
            except OSError as e:
                raise GenerationIOError(path, e) from e
            staged.append((tmp, path))
            previous[path] = existing
            result[path] = True

        committed: list[str] = []
        for tmp, path in staged:
            try:
                os.replace(tmp, path)
            except OSError as e:
                for done in reversed(committed):
                    _restore(done, previous[done])
                raise GenerationIOError(path, e) from e
            committed.append(path)
    finally:
        for tmp, _path in staged:
            if os.path.exists(tmp):
                os.remove(tmp)
    return result
