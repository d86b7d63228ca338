import pytest

from plugins.gitea_pages.errors import ContentNotFound


class FakeGiteaClient:
    """In-memory stand-in for GiteaClient.

    ``files`` is keyed by (owner, repo, path, ref); a value that is an
    exception instance is raised instead of returned.
    """

    def __init__(self):
        self.topics = {}
        self.branches = set()
        self.files = {}
        self.fetches = []

    def add_repo(self, owner, repo, topics=(), branches=()):
        self.topics[(owner, repo)] = set(topics)
        for branch in branches:
            self.branches.add((owner, repo, branch))

    def list_topics(self, owner, repo):
        if (owner, repo) not in self.topics:
            raise ContentNotFound(f"{owner}/{repo}")
        return set(self.topics[(owner, repo)])

    def has_branch(self, owner, repo, branch):
        return (owner, repo, branch) in self.branches

    def fetch_raw(self, owner, repo, file_path, ref=""):
        self.fetches.append((owner, repo, file_path, ref))
        value = self.files.get((owner, repo, file_path, ref))
        if value is None:
            raise ContentNotFound(f"{owner}/{repo}/{file_path}@{ref}")
        if isinstance(value, Exception):
            raise value
        return value


@pytest.fixture
def fake_client():
    return FakeGiteaClient()
