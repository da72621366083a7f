import io
import json
import struct
import tarfile
import warnings
import zipfile

import pytest

from artifact_outputs.archive import TarArchiveReader, ZipArchiveReader
from artifact_outputs.errors import NotFoundError, ParseError
from artifact_outputs.extractor import extract_and_parse


def _zip_bytes(members: dict[str, bytes]) -> bytes:
    data = io.BytesIO()
    with zipfile.ZipFile(data, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for name, payload in members.items():
            archive.writestr(name, payload)
    return data.getvalue()


def _tar_bytes(members: dict[str, bytes]) -> bytes:
    data = io.BytesIO()
    with tarfile.open(fileobj=data, mode="w:gz") as tar:
        for name, payload in members.items():
            info = tarfile.TarInfo(name=name)
            info.size = len(payload)
            tar.addfile(info, io.BytesIO(payload))
    return data.getvalue()


def test_extract_parses_named_entry() -> None:
    archive = _zip_bytes(
        {
            "report.json": b'{"score": 7, "passed": true}',
            "other.txt": b"ignored",
        }
    )
    parsed = extract_and_parse(archive, "report.json")
    assert parsed == {"score": 7, "passed": True}
    assert list(parsed) == ["score", "passed"]


def test_extract_requires_verbatim_name_including_directory() -> None:
    archive = _zip_bytes({"out/report.json": b'{"a": 1}'})
    assert extract_and_parse(archive, "out/report.json") == {"a": 1}
    with pytest.raises(NotFoundError):
        extract_and_parse(archive, "report.json")
    with pytest.raises(NotFoundError):
        extract_and_parse(archive, "./out/report.json")


def test_missing_entry_lists_present_names() -> None:
    archive = _zip_bytes({"a.json": b"{}", "dir/b.json": b"{}"})
    with pytest.raises(NotFoundError) as excinfo:
        extract_and_parse(archive, "report.json")
    message = str(excinfo.value)
    assert "report.json" in message
    assert "a.json" in message
    assert "dir/b.json" in message


def test_malformed_json_is_parse_error() -> None:
    archive = _zip_bytes({"report.json": b'{"score": 7,'})
    with pytest.raises(ParseError, match="report.json"):
        extract_and_parse(archive, "report.json")


@pytest.mark.parametrize("payload", [b"[1, 2, 3]", b"42", b'"text"', b"null"])
def test_non_object_document_is_parse_error(payload: bytes) -> None:
    archive = _zip_bytes({"report.json": payload})
    with pytest.raises(ParseError, match="JSON object"):
        extract_and_parse(archive, "report.json")


def test_undecodable_text_is_parse_error() -> None:
    archive = _zip_bytes({"report.json": b"\xff\xfe{\x00}\x00"})
    with pytest.raises(ParseError, match="decode"):
        extract_and_parse(archive, "report.json")


def test_bytes_that_are_not_an_archive_are_parse_error() -> None:
    with pytest.raises(ParseError, match="archive"):
        extract_and_parse(b"not a zip file", "report.json")


def test_tar_reader_is_swappable() -> None:
    archive = _tar_bytes({"metrics/report.json": json.dumps({"ok": True}).encode()})
    assert extract_and_parse(archive, "metrics/report.json", TarArchiveReader()) == {"ok": True}


def test_zip_reader_skips_directory_entries() -> None:
    data = io.BytesIO()
    with zipfile.ZipFile(data, "w") as archive:
        archive.writestr("dir/", b"")
        archive.writestr("dir/x.json", b"{}")
    assert ZipArchiveReader().names(data.getvalue()) == ["dir/x.json"]


def _zip_with_duplicates(name: str, payloads: list[bytes]) -> bytes:
    data = io.BytesIO()
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        with zipfile.ZipFile(data, "w") as archive:
            for payload in payloads:
                archive.writestr(name, payload)
    return data.getvalue()


def _tar_with_duplicates(name: str, payloads: list[bytes]) -> bytes:
    data = io.BytesIO()
    with tarfile.open(fileobj=data, mode="w:gz") as tar:
        for payload in payloads:
            info = tarfile.TarInfo(name=name)
            info.size = len(payload)
            tar.addfile(info, io.BytesIO(payload))
    return data.getvalue()


def test_duplicate_zip_entries_first_match_wins() -> None:
    archive = _zip_with_duplicates("report.json", [b'{"which": "first"}', b'{"which": "second"}'])
    assert extract_and_parse(archive, "report.json") == {"which": "first"}


def test_duplicate_tar_entries_first_match_wins() -> None:
    archive = _tar_with_duplicates("report.json", [b'{"which": "first"}', b'{"which": "second"}'])
    assert extract_and_parse(archive, "report.json", TarArchiveReader()) == {"which": "first"}


@pytest.mark.parametrize("constant", [b"NaN", b"Infinity", b"-Infinity"])
def test_non_standard_json_constants_are_parse_error(constant: bytes) -> None:
    archive = _zip_bytes({"report.json": b'{"a": ' + constant + b"}"})
    with pytest.raises(ParseError, match="report.json"):
        extract_and_parse(archive, "report.json")


def _patch_central_header(archive: bytes, offset: int, value: int) -> bytes:
    data = bytearray(archive)
    start = data.index(b"PK\x01\x02")
    struct.pack_into("<H", data, start + offset, value)
    return bytes(data)


def test_encrypted_entry_is_parse_error() -> None:
    archive = _zip_bytes({"report.json": b'{"a": 1}'})
    flags = struct.unpack_from("<H", archive, archive.index(b"PK\x01\x02") + 8)[0]
    archive = _patch_central_header(archive, 8, flags | 0x1)

    with pytest.raises(ParseError, match="report.json"):
        extract_and_parse(archive, "report.json")


def test_unsupported_compression_is_parse_error() -> None:
    archive = _zip_bytes({"report.json": b'{"a": 1}'})
    # Method 1 (shrink) is not implemented by zipfile.
    archive = _patch_central_header(archive, 10, 1)

    with pytest.raises(ParseError, match="report.json"):
        extract_and_parse(archive, "report.json")
