import pytest

from orthanc_cli.errors import MalformedPairError
from orthanc_cli.utils.cli_parse import optional_list, parse_tag_pairs


def test_pairs_parsed():
    assert parse_tag_pairs(["A=1", "B=2"]) == {"A": "1", "B": "2"}


def test_missing_equal_sign_rejected():
    with pytest.raises(MalformedPairError) as exc:
        parse_tag_pairs(["A=1", "Bad"])
    assert exc.value.token == "Bad"
    assert exc.value.message == "Wrong option value 'Bad'"
    assert exc.value.details == "Must be of format 'TagName=TagValue'"


def test_value_with_equal_sign_rejected():
    with pytest.raises(MalformedPairError):
        parse_tag_pairs(["StudyDescription=a=b"])


def test_empty_value_allowed():
    assert parse_tag_pairs(["PatientName="]) == {"PatientName": ""}


def test_later_token_wins():
    assert parse_tag_pairs(["A=1", "A=2"]) == {"A": "2"}


def test_wildcards_kept_verbatim():
    assert parse_tag_pairs(["PatientName=*Doe*"]) == {"PatientName": "*Doe*"}


def test_optional_list():
    assert optional_list(()) is None
    assert optional_list(None) is None
    assert optional_list(("ID", "Number of Studies")) == ["ID", "Number of Studies"]
