from drone_cache_convert.utils.errors import (
    ConfigurationError,
    ConversionError,
    FoundationError,
    InvalidDocumentError,
    ParseError,
    ProblemDetail,
)


def test_problem_detail_drops_empty_fields():
    problem = ProblemDetail(title="Error", status=400, detail="Bad")
    assert problem.model_dump() == {
        "title": "Error",
        "status": 400,
        "detail": "Bad",
        "type": "about:blank",
    }


def test_foundation_error_wraps_problem():
    error = FoundationError("Oops", status=404)
    assert error.problem.status == 404
    assert str(error) == "Oops"


def test_conversion_errors_carry_class_defaults():
    assert ConversionError("x").problem.status == 422
    assert InvalidDocumentError("x").problem.type.endswith("/invalid-document")
    assert ConfigurationError("x").problem.status == 500


def test_parse_error_records_position():
    error = ParseError("bad yaml", line=3, column=7)
    assert isinstance(error, ConversionError)
    assert error.problem.status == 400
    assert error.problem.extra == {"line": 3, "column": 7}
    assert error.problem.model_dump()["extra"] == {"line": 3, "column": 7}
