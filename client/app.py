import logging
from typing import Optional

import httpx

from client.api import ApiClient, ApiError
from client.dashboard import Dashboard, Notifier
from client.session import LocalStorage, SessionContext

logger = logging.getLogger(__name__)


class TaskApp:
    """
    Client-side application shell

    Loads the session context from storage when the app starts and hands
    that one object to the API client; login and logout update it in
    place and write it back.
    """

    def __init__(self, storage: LocalStorage, base_url: str = "",
                 http: Optional[httpx.Client] = None,
                 notifier: Optional[Notifier] = None):
        self.storage = storage
        self.notifier = notifier or Notifier()
        self.session = SessionContext.load(storage)
        self.api = ApiClient(base_url, session=self.session, http=http)
        self.dashboard = Dashboard(self.api, self.notifier)

    def restore_session(self) -> bool:
        """
        Re-validate a stored token against the server

        Clears the stored session if the token is rejected or the server
        cannot be reached.
        """
        if not self.session.is_authenticated:
            return False
        try:
            user = self.api.me()
        except ApiError as exc:
            logger.info("Stored session rejected: %s", exc.message)
            self.session.clear(self.storage)
            return False
        self.session.sign_in(self.session.token, user)
        self.session.save(self.storage)
        logger.debug("Session restored for user %s", self.session.user_id)
        return True

    def register(self, name: str, email: str, password: str) -> bool:
        try:
            self.api.register(name, email, password)
        except ApiError as exc:
            self.notifier.error(exc.message)
            return False
        self.notifier.success("Registration successful! You can now log in.")
        return True

    def login(self, email: str, password: str) -> bool:
        try:
            result = self.api.login(email, password)
        except ApiError as exc:
            self.notifier.error(exc.message)
            return False
        self.session.sign_in(result["token"], result["user"])
        self.session.save(self.storage)
        self.notifier.success("Login successful!")
        return True

    def logout(self) -> None:
        self.session.clear(self.storage)
        self.dashboard.tasks = []
