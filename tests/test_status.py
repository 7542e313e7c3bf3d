from chartdata.rows import NoValidDataError
from chartdata.status import LoadStatus, error_status, loading_status, success_status


def test_success_message_has_count():
    status = success_status(42)
    assert status.message == "Successfully loaded 42 data points"
    assert status.css_class == "success"


def test_error_message_has_description():
    status = error_status(NoValidDataError())
    assert status.message == "Error: No valid data found in the CSV file"
    assert status.css_class == "error"


def test_loading_is_not_an_error():
    assert loading_status().is_error is False


def test_payload():
    assert LoadStatus("x", is_error=True).to_payload() == {"message": "x", "class": "error"}
