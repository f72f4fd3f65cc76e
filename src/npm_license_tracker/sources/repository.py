"""Repository URL normalization.

Package metadata declares repositories in many shapes (``git+ssh://``,
``git@github.com:``, ``github:owner/repo`` shorthand, ...). Normalizing them to
an ``https://`` URL of the repository root keeps cache keys stable and lets a
single API call list the root directory.
"""

from typing import Optional

from npm_license_tracker.models import PackageMeta

SHORTHAND_HOSTS = {
    "github:": "https://github.com/",
    "gitlab:": "https://gitlab.com/",
    "bitbucket:": "https://bitbucket.org/",
}

ROOT_TRUNCATED_HOSTS = ("https://github.com/", "https://gitlab.com/")


def _strip_credentials(url: str, scheme: str) -> str:
    """Drop the scheme and any ``user@`` part, returning ``host/path``."""
    rest = url[len(scheme):]
    host_end = rest.find("/")
    at = rest.find("@", 0, host_end if host_end != -1 else len(rest))
    if at != -1:
        rest = rest[at + 1:]

    # scp-like "host:owner/repo"
    colon = rest.find(":")
    slash = rest.find("/")
    if colon != -1 and (slash == -1 or colon < slash):
        rest = rest[:colon] + "/" + rest[colon + 1:]
    return rest


def _nth_index(text: str, sub: str, n: int) -> int:
    """Return the index of the n-th (0-based) occurrence of ``sub``, or -1."""
    index = -1
    for _ in range(n + 1):
        index = text.find(sub, index + 1)
        if index == -1:
            break
    return index


def normalize_repo_url(url: str) -> str:
    """Normalize a repository URL to an ``https://`` repository root.

    Args:
        url: Repository URL as declared in package metadata.

    Returns:
        Normalized URL. GitHub and GitLab URLs are truncated to
        ``https://host/owner/repo``.
    """
    url = url.strip()

    if url.startswith("git+"):
        url = url[4:]

    if url.startswith("git://"):
        url = "https://" + url[len("git://"):]
    elif url.startswith("ssh://"):
        url = "https://" + _strip_credentials(url, "ssh://")
    elif url.startswith("git@"):
        url = "https://" + _strip_credentials(url, "")
    else:
        for prefix, host in SHORTHAND_HOSTS.items():
            if url.startswith(prefix):
                url = host + url[len(prefix):]
                break
        else:
            if not url.startswith("http") and "://" not in url:
                # bare "owner/repo" refers to GitHub
                url = "https://github.com/" + url

    url = url.replace("://www.", "://", 1)
    if url.startswith("http://"):
        url = "https://" + url[len("http://"):]

    if url.startswith(ROOT_TRUNCATED_HOSTS):
        for separator in ("#", "?"):
            url = url.split(separator, 1)[0]

        # license files live in the root, one listing per repository
        index = _nth_index(url, "/", 4)
        if index > -1:
            url = url[:index]

    if url.endswith(".git"):
        url = url[:-4]

    return url


def package_repo_url(meta: PackageMeta) -> Optional[str]:
    """Return the normalized repository URL of a package, if declared."""
    url = meta.repository_url
    if not url:
        return None
    return normalize_repo_url(url)
