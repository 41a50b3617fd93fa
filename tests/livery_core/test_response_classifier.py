import pytest
from attrition_desktop.livery_core.application.response_classifier import HtmlResponseClassifier
from attrition_desktop.livery_core.domain.errors import (
    AuthenticationRequiredError,
    HomepageInsteadOfArchiveError,
    HtmlInsteadOfArchiveError,
    RetryableDownloadError,
)


@pytest.fixture
def classifier():
    return HtmlResponseClassifier(min_length=1000)


@pytest.mark.parametrize("content_type, length, expected", [
    ("text/html; charset=utf-8", "5000", True),
    ("text/html", "1000", False),
    ("text/html", None, False),
    ("text/html", "not-a-number", False),
    ("application/zip", "5000", False),
    ("", "5000", False),
])
def test_is_suspect(classifier, content_type, length, expected):
    assert classifier.is_suspect(content_type, length) is expected


def test_login_page_means_authentication_required(classifier):
    error = classifier.classify("<html><body>Please login to continue</body></html>", 200)

    assert isinstance(error, AuthenticationRequiredError)
    assert isinstance(error, RetryableDownloadError)
    assert "logged into the web application" in str(error)


def test_homepage_is_detected(classifier):
    error = classifier.classify("<html><head><title>Home</title></head></html>", 200)

    assert isinstance(error, HomepageInsteadOfArchiveError)
    assert "returned homepage" in str(error)


def test_other_html_reports_status(classifier):
    error = classifier.classify("<html><body>Maintenance</body></html>", 200)

    assert isinstance(error, HtmlInsteadOfArchiveError)
    assert str(error).endswith("Status: 200")


def test_auth_markers_take_precedence(classifier):
    error = classifier.classify("<html><title>Home</title>Unauthorized</html>", 200)
    assert isinstance(error, AuthenticationRequiredError)
