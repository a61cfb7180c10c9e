from dataclasses import dataclass
from findtag.exceptions import InvalidReferenceError


@dataclass(frozen=True)
class ImageReference:
    repository: str
    tag: str = "latest"

    def __str__(self) -> str:
        return f"{self.repository}:{self.tag}"


def parse_reference(image: str) -> ImageReference:
    """Normalize `name[:tag]` into a repository path and tag.

    Official images live under `library/` on Docker Hub, so a name
    without any `/` gets that prefix. Only the text after the last
    colon is the tag.
    """
    image = image.strip()
    if not image:
        raise InvalidReferenceError("Missing required image name.")

    if "/" not in image:
        image = f"library/{image}"

    repository, tag = image, "latest"
    head, sep, tail = image.rpartition(":")
    # A colon followed by a path belongs to a registry host:port.
    if sep and "/" not in tail:
        repository, tag = head, tail

    if not repository or repository.endswith("/"):
        raise InvalidReferenceError(f"{image}: Repository path is empty.")
    if not tag:
        raise InvalidReferenceError(f"{image}: Tag is empty.")

    return ImageReference(repository, tag)
