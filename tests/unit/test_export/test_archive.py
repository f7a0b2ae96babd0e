"""Tests for the zip bundle of materials."""

import io
import zipfile

from edu_master.export.archive import (
    build_bundle,
    bundle_entry_name,
    bundle_folder,
    bundle_name,
)
from edu_master.export.files import ExportedFile


def _file(name: str, content: bytes = b"x") -> ExportedFile:
    return ExportedFile(name, "application/octet-stream", content)


class TestNames:
    def test_folder(self) -> None:
        assert bundle_folder(" 파이썬 기초 과정 ") == "파이썬_기초_과정_수업자료"

    def test_folder_no_path_separators(self) -> None:
        assert bundle_folder("AI/ML") == "AI_ML_수업자료"
        assert bundle_folder("../../evil") == ".._.._evil_수업자료"

    def test_entry_name_truncates_topic(self) -> None:
        name = bundle_entry_name(3, "ppt_outline", "데이터 분석과 시각화 입문 과정", "pptx")
        assert name == "3_ppt_outline_데이터 분석과 시각.pptx"

    def test_entry_name_no_path_separators(self) -> None:
        assert "/" not in bundle_entry_name(1, "quiz", "AI/ML", "doc")

    def test_bundle_name(self) -> None:
        assert bundle_name("파이썬 기초") == "파이썬 기초_수업자료_패키지.zip"


class TestBuildBundle:
    def test_entries_numbered_in_order(self) -> None:
        files = [
            ("lesson_plan", _file("a.doc", b"plan")),
            ("script", _file("b.doc")),
            ("ppt_outline", _file("c.pptx")),
        ]
        bundle = build_bundle("파이썬 기초", files)
        assert bundle.filename == "파이썬 기초_수업자료_패키지.zip"
        assert bundle.media_type == "application/zip"

        with zipfile.ZipFile(io.BytesIO(bundle.content)) as archive:
            names = archive.namelist()
            assert names == [
                "파이썬_기초_수업자료/1_lesson_plan_파이썬 기초.doc",
                "파이썬_기초_수업자료/2_script_파이썬 기초.doc",
                "파이썬_기초_수업자료/3_ppt_outline_파이썬 기초.pptx",
            ]
            assert archive.read(names[0]) == b"plan"
            assert archive.getinfo(names[0]).compress_type == zipfile.ZIP_DEFLATED

    def test_slash_topic_stays_in_one_folder(self) -> None:
        bundle = build_bundle("../../AI\\ML", [("quiz", _file("q.doc"))])
        with zipfile.ZipFile(io.BytesIO(bundle.content)) as archive:
            (name,) = archive.namelist()
        folder, entry = name.split("/")
        assert folder == ".._.._AI_ML_수업자료"
        assert "\\" not in entry
        assert not name.startswith("../")

    def test_empty_bundle(self) -> None:
        bundle = build_bundle("T", [])
        with zipfile.ZipFile(io.BytesIO(bundle.content)) as archive:
            assert archive.namelist() == []
