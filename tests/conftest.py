import asyncio
import os
import sys
import tempfile
import zipfile
from io import BytesIO
from pathlib import Path
from uuid import uuid4

# Ensure src is in sys.path for import
SRC_DIR = Path(__file__).resolve().parent.parent / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

# Settings are read at import time, so the environment must be ready first.
_DEFAULT_DB_DIR = tempfile.mkdtemp(prefix="voicecollections-tests-")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_DEFAULT_DB_DIR}/default.db")

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from voicecollections.database import Base, User
from voicecollections.infrastructure.tts import TTSProvider, Voice
from voicecollections.models import SpeechRequest, SynthesisResult


def make_engine(path: Path):
    return create_async_engine(f"sqlite+aiosqlite:///{path}", poolclass=NullPool)


async def create_tables(engine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# --- Sample documents ---
def build_pdf(pages: list[list[str]]) -> bytes:
    """Build a minimal PDF; each page is a list of text fragments drawn on separate lines."""
    page_ids = [4 + 2 * i for i in range(len(pages))]
    kids = " ".join(f"{pid} 0 R" for pid in page_ids)
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        f"<< /Type /Pages /Kids [{kids}] /Count {len(pages)} >>".encode(),
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]
    for page_id, fragments in zip(page_ids, pages):
        objects.append(
            (
                "<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
                f"/Resources << /Font << /F1 3 0 R >> >> /Contents {page_id + 1} 0 R >>"
            ).encode()
        )
        stream = " ".join(
            f"BT /F1 12 Tf 72 {720 - 20 * n} Td ({fragment}) Tj ET"
            for n, fragment in enumerate(fragments)
        ).encode()
        objects.append(b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream")

    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, obj in enumerate(objects, start=1):
        offsets.append(len(out))
        out += f"{number} 0 obj\n".encode() + obj + b"\nendobj\n"
    xref = len(out)
    out += f"xref\n0 {len(objects) + 1}\n".encode()
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += f"{offset:010d} 00000 n \n".encode()
    out += (
        f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\nstartxref\n{xref}\n%%EOF\n"
    ).encode()
    return bytes(out)


def build_docx(paragraphs: list[str]) -> bytes:
    """Build a minimal Office Open XML document with one run per paragraph."""
    body = "".join(f"<w:p><w:r><w:t>{p}</w:t></w:r></w:p>" for p in paragraphs)
    document = (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        '<w:document xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main">'
        f"<w:body>{body}</w:body></w:document>"
    )
    content_types = (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        '<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">'
        '<Default Extension="xml" ContentType="application/xml"/>'
        '<Override PartName="/word/document.xml" ContentType="application/'
        'vnd.openxmlformats-officedocument.wordprocessingml.document.main+xml"/>'
        "</Types>"
    )
    buffer = BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr("[Content_Types].xml", content_types)
        archive.writestr("word/document.xml", document)
    return buffer.getvalue()


class FakeProvider(TTSProvider):
    """In-memory TTS provider recording every request."""

    name = "fake"

    def __init__(self, audio_url: str = "https://cdn.example.com/audio/1.mp3", error=None):
        self.audio_url = audio_url
        self.error = error
        self.requests: list[SpeechRequest] = []

    def list_voices(self) -> list[Voice]:
        return [Voice(id="1", name="Speaker 1")]

    async def synthesize(self, request: SpeechRequest) -> SynthesisResult:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return SynthesisResult(audio_url=self.audio_url)


# --- Fixtures ---
@pytest.fixture
def pdf_bytes():
    return build_pdf


@pytest.fixture
def docx_bytes():
    return build_docx


@pytest.fixture
async def session_factory(tmp_path):
    engine = make_engine(tmp_path / "test.db")
    await create_tables(engine)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def user(db_session):
    user = User(id=str(uuid4()), email="reader@example.com", hashed_password="test-hash")
    db_session.add(user)
    await db_session.commit()
    return user


@pytest.fixture
def api_session_factory(tmp_path):
    """Session factory for TestClient-based tests (created outside any running loop)."""
    engine = make_engine(tmp_path / "api.db")
    asyncio.run(create_tables(engine))
    yield async_sessionmaker(engine, expire_on_commit=False)
    asyncio.run(engine.dispose())
