"""Tests for stylegen.core.writer: source buffers and all-or-nothing writes."""

import os
from pathlib import Path

import pytest
from stylegen.core.errors import GenerationIOError
from stylegen.core.writer import ProjectInfo, SourceFile, write_artifacts


class TestSourceFile:
    def test_header_banner(self) -> None:
        text = SourceFile('out/style_basic.h', ProjectInfo(name='codegen_style', source='basic.style')).render()
        assert text == (
            '/*\n'
            'WARNING! All changes made in this file will be lost!\n'
            "Created from 'basic.style' by 'codegen_style'\n"
            '*/\n'
            '#pragma once\n'
            '\n'
        )

    def test_source_has_no_pragma(self) -> None:
        assert '#pragma once' not in SourceFile('style_basic.cpp', ProjectInfo()).render()

    def test_namespaces_closed_on_render(self) -> None:
        source = SourceFile('a.cpp', ProjectInfo())
        source.push_namespace('style').push_namespace().write('int x;\n')
        assert source.render().endswith('namespace style {\nnamespace {\nint x;\n} // namespace\n} // namespace style\n')

    def test_include(self) -> None:
        assert '#include "style_basic.h"\n' in SourceFile('a.cpp', ProjectInfo()).include('style_basic.h').render()


class TestWriteArtifacts:
    def test_writes_and_creates_dirs(self, tmp_path: Path) -> None:
        target = tmp_path / 'gen' / 'a.h'
        assert write_artifacts({str(target): b'one'}) == {str(target): True}
        assert target.read_bytes() == b'one'

    def test_unchanged_file_left_alone(self, tmp_path: Path) -> None:
        target = tmp_path / 'a.h'
        target.write_bytes(b'same')
        mtime = target.stat().st_mtime_ns
        assert write_artifacts({str(target): b'same'}) == {str(target): False}
        assert target.stat().st_mtime_ns == mtime

    def test_nothing_written_when_one_fails(self, tmp_path: Path) -> None:
        good = tmp_path / 'good.h'
        blocker = tmp_path / 'blocker'
        blocker.write_text('not a directory')
        with pytest.raises(GenerationIOError):
            write_artifacts({str(good): b'data', str(blocker / 'bad.cpp'): b'data'})
        assert not good.exists()
        assert sorted(p.name for p in tmp_path.iterdir()) == ['blocker']

    def _fail_second_replace(self, monkeypatch: pytest.MonkeyPatch) -> None:
        real_replace = os.replace
        calls: list[str] = []

        def flaky_replace(src: str, dst: str) -> None:
            calls.append(dst)
            if len(calls) == 2:
                raise PermissionError(13, 'Permission denied')
            real_replace(src, dst)

        monkeypatch.setattr(os, 'replace', flaky_replace)

    def test_failed_rename_restores_replaced_files(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        header, source = tmp_path / 'x.h', tmp_path / 'x.cpp'
        header.write_bytes(b'old header')
        source.write_bytes(b'old source')
        self._fail_second_replace(monkeypatch)
        with pytest.raises(GenerationIOError):
            write_artifacts({str(header): b'new header', str(source): b'new source'})
        assert header.read_bytes() == b'old header'
        assert source.read_bytes() == b'old source'
        assert sorted(p.name for p in tmp_path.iterdir()) == ['x.cpp', 'x.h']

    def test_failed_rename_removes_new_files(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        header, source = tmp_path / 'x.h', tmp_path / 'x.cpp'
        self._fail_second_replace(monkeypatch)
        with pytest.raises(GenerationIOError):
            write_artifacts({str(header): b'new header', str(source): b'new source'})
        assert list(tmp_path.iterdir()) == []
