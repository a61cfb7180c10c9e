import pytest
from findtag.exceptions import ConfigurationError, InvalidReferenceError
from findtag.reference import ImageReference, parse_reference


@pytest.mark.parametrize(
    "image,repository,tag",
    [
        ("nginx", "library/nginx", "latest"),
        ("nginx:1.25", "library/nginx", "1.25"),
        ("org/app:1.2", "org/app", "1.2"),
        ("jenkins/jenkins:latest-jdk11", "jenkins/jenkins", "latest-jdk11"),
        ("a/b/c:x:y", "a/b/c:x", "y"),
        ("localhost:5000/app", "localhost:5000/app", "latest"),
        ("localhost:5000/app:2.0", "localhost:5000/app", "2.0"),
        ("  traefik  ", "library/traefik", "latest"),
    ],
)
def test_parse_reference(image: str, repository: str, tag: str) -> None:
    assert parse_reference(image) == ImageReference(repository, tag)


@pytest.mark.parametrize("image", ["", "   ", "nginx:", ":1.0", "org/"])
def test_parse_reference_invalid(image: str) -> None:
    with pytest.raises(InvalidReferenceError):
        parse_reference(image)


def test_invalid_reference_is_configuration_error() -> None:
    with pytest.raises(ConfigurationError):
        parse_reference("")


def test_image_reference_str() -> None:
    assert str(ImageReference("library/nginx")) == "library/nginx:latest"
