import pytest

from clubhub.domain.registry import models, policy
from clubhub.domain.registry.bulk import parse_teacher_lines


def test_parses_lines_and_skips_blanks():
    text = f"T001, Malee, {models.DEPARTMENTS[0]}\n\nT002,Somsak,{models.DEPARTMENTS[3]}\n"
    entries = parse_teacher_lines(text)
    assert [(e.id, e.name, e.department) for e in entries] == [
        ("T001", "Malee", models.DEPARTMENTS[0]),
        ("T002", "Somsak", models.DEPARTMENTS[3]),
    ]


def test_reports_every_bad_line():
    text = "\n".join(
        [
            f"T001,Malee,{models.DEPARTMENTS[0]}",
            "T02,Short,ศิลปะ",
            "T003,Wrong,Astrology",
            "only,two",
        ]
    )
    with pytest.raises(policy.RegistryValidationError) as excinfo:
        parse_teacher_lines(text)
    details = excinfo.value.details
    assert excinfo.value.code == "bulk_import_invalid"
    assert [d.split(":")[0] for d in details] == ["line 2", "line 3", "line 4"]


@pytest.mark.parametrize("text", ["", "   \n  "])
def test_empty_input_rejected(text):
    with pytest.raises(policy.RegistryValidationError) as excinfo:
        parse_teacher_lines(text)
    assert excinfo.value.code == "bulk_import_empty"
