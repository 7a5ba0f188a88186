# client.py
import requests

REQUEST_TIMEOUT = 12


class LeaderboardClient:
    """HTTP client for a running leaderboard service."""

    def __init__(self, base_url: str, session=None, timeout: float = REQUEST_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/api/leaderboard"

    def fetch_leaderboard(self) -> list[dict]:
        r = self.session.get(self.endpoint, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def load_leaderboard_page(self) -> dict:
        return {"leaderboard": self.fetch_leaderboard()}

    def submit_score(self, name: str, score) -> str:
        r = self.session.post(
            self.endpoint,
            json={"name": name, "score": score},
            timeout=self.timeout,
        )
        r.raise_for_status()
        return r.text
