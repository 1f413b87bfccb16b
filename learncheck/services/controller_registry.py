"""Process-local registry of quiz controllers, one per student."""
import logging
from collections import OrderedDict

from learncheck.config import MAX_CONTROLLERS
from learncheck.services.gateway import QuizGateway
from learncheck.services.quiz_controller import PacingDelays, QuizController
from learncheck.services.session_store import SessionStore

logger = logging.getLogger(__name__)


class ControllerRegistry:
    """
    Least-recently-used set of controllers.
    Sessions are persisted on every change, so evicting an idle
    controller only drops its view state.
    """

    def __init__(
        self,
        gateway: QuizGateway,
        store: SessionStore,
        pacing: PacingDelays | None = None,
        max_controllers: int = MAX_CONTROLLERS,
    ):
        self.gateway = gateway
        self.store = store
        self.pacing = pacing
        self.max_controllers = max(1, max_controllers)
        self._controllers: OrderedDict[str, QuizController] = OrderedDict()

    def get(self, user_id: str) -> QuizController:
        """Get the controller of `user_id`, creating it on first use."""
        controller = self._controllers.get(user_id)
        if controller is not None:
            self._controllers.move_to_end(user_id)
            return controller

        controller = QuizController(self.gateway, self.store, pacing=self.pacing)
        self._controllers[user_id] = controller
        logger.debug("Created quiz controller for user %s", user_id)
        self._evict_idle()
        return controller

    def _evict_idle(self) -> None:
        # Busy controllers still have an action in flight and are kept
        for user_id in list(self._controllers)[:-1]:
            if len(self._controllers) <= self.max_controllers:
                return
            if self._controllers[user_id].is_busy:
                continue
            del self._controllers[user_id]
            logger.debug("Evicted idle quiz controller for user %s", user_id)

    def __contains__(self, user_id: str) -> bool:
        return user_id in self._controllers

    def __len__(self) -> int:
        return len(self._controllers)
