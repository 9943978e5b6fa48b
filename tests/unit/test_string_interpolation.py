import pytest
from cdeploy.UTILS.string_interpolation import EnvironmentInterpolator, InterpolationError

CONTEXT = {"TAG": "1.0", "EMPTY": "", "NAME": "web"}


@pytest.mark.parametrize("template,expected", [
    ("app:${TAG}", "app:1.0"),
    ("app:$TAG", "app:1.0"),
    ("${MISSING}", ""),
    ("${MISSING:-dev}", "dev"),
    ("${EMPTY:-dev}", "dev"),
    ("${EMPTY-dev}", ""),
    ("${MISSING-dev}", "dev"),
    ("${NAME:+set}", "set"),
    ("${EMPTY:+set}", ""),
    ("${EMPTY+set}", "set"),
    ("cost $$5", "cost $5"),
    ("$${TAG}", "${TAG}"),
    ("no variables", "no variables"),
])
def test_interpolate(template, expected):
    assert EnvironmentInterpolator.interpolate(template, CONTEXT) == expected


def test_required_missing():
    with pytest.raises(InterpolationError, match="need a tag"):
        EnvironmentInterpolator.interpolate("${MISSING:?need a tag}", CONTEXT)


def test_required_empty_with_colon():
    with pytest.raises(InterpolationError):
        EnvironmentInterpolator.interpolate("${EMPTY:?}", CONTEXT)


def test_required_empty_without_colon():
    assert EnvironmentInterpolator.interpolate("${EMPTY?}", CONTEXT) == ""


def test_invalid_format():
    with pytest.raises(InterpolationError):
        EnvironmentInterpolator.interpolate("${TAG:x}", CONTEXT)


@pytest.mark.parametrize("template,expected", [
    ("${IMG:-${REG:-local}/app}:1", "local/app:1"),
    ("${IMG:-${NAME}/app}", "web/app"),
    ("${NAME:-${MISSING:?never expanded}}", "web"),
    ("${NAME:+${TAG}}", "1.0"),
])
def test_nested_defaults(template, expected):
    assert EnvironmentInterpolator.interpolate(template, CONTEXT) == expected


def test_nested_required_message():
    with pytest.raises(InterpolationError, match="need 1.0"):
        EnvironmentInterpolator.interpolate("${MISSING:?need ${TAG}}", CONTEXT)


def test_unterminated_placeholder():
    with pytest.raises(InterpolationError):
        EnvironmentInterpolator.interpolate("app:${TAG", CONTEXT)


def test_tree_interpolates_values_only():
    data = {"${NAME}": ["${TAG}", 3, None], "port": 80}
    assert EnvironmentInterpolator.interpolate_tree(data, CONTEXT) == {"${NAME}": ["1.0", 3, None], "port": 80}
