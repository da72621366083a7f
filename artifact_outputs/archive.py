from __future__ import annotations

import io
import tarfile
import zipfile
import zlib
from typing import Protocol


class ArchiveReader(Protocol):
    errors: tuple[type[Exception], ...]

    def names(self, data: bytes) -> list[str]: ...

    def read(self, data: bytes, name: str) -> bytes: ...


class ZipArchiveReader:
    """Reads zip containers, the format GitHub serves artifact archives in."""

    # RuntimeError: encrypted member. NotImplementedError: unsupported compression.
    errors = (
        zipfile.BadZipFile,
        zipfile.LargeZipFile,
        zlib.error,
        EOFError,
        RuntimeError,
        NotImplementedError,
    )

    def names(self, data: bytes) -> list[str]:
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            return [info.filename for info in archive.infolist() if not info.is_dir()]

    def read(self, data: bytes, name: str) -> bytes:
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            # ZipFile.read(name) resolves duplicates to the last member; take the first.
            info = next((i for i in archive.infolist() if i.filename == name and not i.is_dir()), None)
            if info is None:
                raise KeyError(name)
            return archive.read(info)


class TarArchiveReader:
    """Reads plain or compressed tar containers.

    Not selectable from the command line: GitHub only serves artifacts as zip.
    Pass it to ``extract_and_parse`` when the archive comes from elsewhere.
    """

    errors = (tarfile.TarError, EOFError, OSError)

    def names(self, data: bytes) -> list[str]:
        with tarfile.open(fileobj=io.BytesIO(data), mode="r:*") as tar:
            return [member.name for member in tar.getmembers() if member.isfile()]

    def read(self, data: bytes, name: str) -> bytes:
        with tarfile.open(fileobj=io.BytesIO(data), mode="r:*") as tar:
            member = next((m for m in tar.getmembers() if m.name == name and m.isfile()), None)
            if member is None:
                raise KeyError(name)
            source = tar.extractfile(member)
            if source is None:
                raise KeyError(name)
            with source:
                return source.read()
