from zoteroid.models import CrossrefWork, DerivedNaming, NormalizedRecord, PublicationKind


def test_record_author_line() -> None:
    record = NormalizedRecord(authors=["Ada Lovelace", "Alan Turing"])
    assert record.author_line == "Ada Lovelace; Alan Turing"


def test_record_kind_prefers_journal() -> None:
    assert NormalizedRecord(publication_type="journal-book-review").kind is PublicationKind.JOURNAL


def test_crossref_work_reads_hyphenated_fields() -> None:
    work = CrossrefWork.model_validate(
        {"container-title": ["Cell"], "published-online": {"date-parts": [[2021, 1]]}}
    )
    assert work.first_container_title() == "Cell"
    assert work.year() == "2021"


def test_naming_file_name_appends_extension() -> None:
    naming = DerivedNaming(folder_name="X", file_base_name="X")
    assert naming.file_name == "X.md"
