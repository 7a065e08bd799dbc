"""
Tests for the legacy sheet CSV loader.
"""
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from naming_review.database import Base
from naming_review.importer import import_csv, main, read_sheet
from naming_review.services.approved_names import search_approved_names

SHEET = (
    "\ufeffApproved name,Service Line,IPR,Approval date,Description,Contact person,Class,Category\n"
    "Atlas Cloud,Consulting,Yes,03/15/2021,Cloud migration accelerator,Dana Cruz,Brand,Offering\n"
    ",Tax,No,,,,,\n"
    "Harbor,Tax,No,2019,Cloud tax engine,Dana Cruz,Brand,Tool\n"
)


@pytest.fixture
def sheet_csv(tmp_path):
    path = tmp_path / "approved_names.csv"
    path.write_text(SHEET, encoding="utf-8")
    return path


def test_read_sheet_strips_bom(sheet_csv):
    rows = read_sheet(sheet_csv)

    assert len(rows) == 3
    assert rows[0]["Approved name"] == "Atlas Cloud"


@pytest.mark.asyncio
async def test_import_csv(sheet_csv, tmp_path):
    url = f"sqlite+aiosqlite:///{tmp_path / 'import.db'}"
    engine = create_async_engine(url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    try:
        result = await import_csv(sheet_csv, database_url=url)
        assert result.imported == 2
        assert result.skipped == 1

        result = await import_csv(sheet_csv, replace=True, database_url=url)
        assert result.removed == 2

        async with async_sessionmaker(engine, class_=AsyncSession)() as db:
            names = [e.approved_name for e in await search_approved_names(db)]
        assert names == ["Atlas Cloud", "Harbor"]
    finally:
        await engine.dispose()


def test_main_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "nope.csv")]) == 1
    assert "File not found" in capsys.readouterr().out
