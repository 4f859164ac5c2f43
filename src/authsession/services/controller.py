"""Authorization request lifecycle.

Drives one request instance through loading, prompting and result
classification:

    UNLOADED -> LOADING -> LOADED -> PROMPTING -> RESOLVED

A configuration change while LOADED rebuilds the request. A RESOLVED
request can be loaded again, which keeps the instance's PKCE verifier and
nonce and mints a new CSRF state.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum

from authsession.agents.base import UserAgent
from authsession.models.config import AuthorizationRequestConfig, ResponseType
from authsession.models.errors import (
    OAuth2Error,
    PromptInProgressError,
    RequestNotLoadedError,
    StateValidationError,
    UserAgentError,
)
from authsession.models.flow import (
    AGENT_ERROR,
    STATE_MISMATCH,
    AuthorizationCancelled,
    AuthorizationDismissed,
    AuthorizationFailure,
    AuthorizationRequestDescriptor,
    AuthorizationResult,
    AuthorizationSuccess,
    PromptOptions,
)
from authsession.models.platform import PlatformProfile
from authsession.models.security import ReplaySecrets
from authsession.providers.policy import ProviderPolicy
from authsession.services.builder import AuthorizationRequestBuilder
from authsession.services.replay import ReplayProtectionManager
from authsession.services.security import validate_state

logger = logging.getLogger(__name__)

INVALID_RESPONSE = "invalid_response"

# Redirect parameter that carries the credential for each response type
_CREDENTIAL_PARAMS = {
    ResponseType.CODE: "code",
    ResponseType.TOKEN: "access_token",
    ResponseType.ID_TOKEN: "id_token",
}


class RequestStatus(str, Enum):
    UNLOADED = "unloaded"
    LOADING = "loading"
    LOADED = "loaded"
    PROMPTING = "prompting"
    RESOLVED = "resolved"


class AuthRequestController:
    """Owns one live authorization request and its prompt.

    The controller holds the request instance's persisted secrets and passes
    them by value to the builder on every rebuild. Builds are serialized so
    concurrent loads never race on the same instance. The user-agent is only
    handed the authorization URL.
    """

    def __init__(
        self,
        config: AuthorizationRequestConfig,
        platform: PlatformProfile,
        policy: ProviderPolicy,
        agent: UserAgent,
        builder: AuthorizationRequestBuilder | None = None,
    ):
        self.policy = policy
        self._config = config
        self._platform = platform
        self._agent = agent
        self._builder = builder or AuthorizationRequestBuilder(
            ReplayProtectionManager(nonce_byte_length=policy.nonce_byte_length)
        )

        self._status = RequestStatus.UNLOADED
        self._descriptor: AuthorizationRequestDescriptor | None = None
        self._secrets: ReplaySecrets | None = None
        self._built_from: tuple[AuthorizationRequestConfig, PlatformProfile] | None = (
            None
        )
        self._result: AuthorizationResult | None = None
        self._error: OAuth2Error | None = None

        self._build_lock = asyncio.Lock()
        self._dismissed: asyncio.Event | None = None

    @property
    def status(self) -> RequestStatus:
        return self._status

    @property
    def request(self) -> AuthorizationRequestDescriptor | None:
        """The live request descriptor, if loaded."""
        return self._descriptor

    @property
    def result(self) -> AuthorizationResult | None:
        return self._result

    @property
    def error(self) -> OAuth2Error | None:
        """The error from the last failed load, if any."""
        return self._error

    @property
    def config(self) -> AuthorizationRequestConfig:
        return self._config

    @property
    def platform(self) -> PlatformProfile:
        return self._platform

    async def load(self, force: bool = False) -> AuthorizationRequestDescriptor:
        """Build the request, or return it if its inputs are unchanged.

        Args:
            force: Rebuild even if the loaded request is current

        Raises:
            PromptInProgressError: If a prompt is running
            ConfigurationError: If the configuration cannot be resolved. The
                controller is left UNLOADED and does not retry.
        """
        self._ensure_not_prompting("reload")

        async with self._build_lock:
            self._ensure_not_prompting("reload")

            if not force and self._is_current():
                return self._descriptor

            self._status = RequestStatus.LOADING
            previous = self._secrets
            while True:
                inputs = (self._config, self._platform)
                try:
                    descriptor = await self._builder.build(
                        inputs[0],
                        inputs[1],
                        self.policy,
                        previous=previous,
                    )
                except OAuth2Error as e:
                    self._mark_unloaded()
                    self._error = e
                    logger.error(f"Failed to load {self.policy.name} request: {e}")
                    raise
                except BaseException:
                    self._mark_unloaded()
                    raise

                previous = descriptor.secrets
                if (self._config, self._platform) == inputs:
                    break
                logger.debug("Request inputs changed during build, rebuilding")

            self._descriptor = descriptor
            self._secrets = descriptor.secrets
            self._built_from = inputs
            self._result = None
            self._error = None
            self._status = RequestStatus.LOADED

            logger.info(
                f"Loaded {self.policy.name} request {descriptor.request_id[:12]}"
            )
            return descriptor

    async def update(
        self,
        config: AuthorizationRequestConfig | None = None,
        platform: PlatformProfile | None = None,
    ) -> AuthorizationRequestDescriptor | None:
        """Apply new inputs, rebuilding a loaded request if they changed.

        Unchanged inputs are a no-op. A build in progress rebuilds from the
        new inputs before it completes. Other requests that are not LOADED
        only record the new inputs; they are used on the next `load()`.
        """
        new_config = config if config is not None else self._config
        new_platform = platform if platform is not None else self._platform

        if (new_config, new_platform) == (self._config, self._platform):
            return self._descriptor

        self._ensure_not_prompting("update")
        self._config = new_config
        self._platform = new_platform

        if self._status is RequestStatus.LOADED:
            logger.debug("Request inputs changed, rebuilding")
            return await self.load()
        return self._descriptor

    def reset(self) -> None:
        """Discard the request instance, including its PKCE pair and nonce."""
        self._ensure_not_prompting("reset")
        self._mark_unloaded()
        self._secrets = None
        self._result = None
        self._error = None

    async def prompt(self, options: PromptOptions | None = None) -> AuthorizationResult:
        """Hand the authorization URL to the user-agent and await the outcome.

        Only valid while LOADED. The result is also stored on `result`.

        Raises:
            PromptInProgressError: If this request is already being prompted
            RequestNotLoadedError: If no loaded request exists
            UserAgentError: If the user-agent fails instead of returning
        """
        if self._status is RequestStatus.PROMPTING:
            logger.warning("Rejecting duplicate prompt for the same request")
            raise PromptInProgressError(
                "A prompt is already in progress for this request"
            )
        if self._status is not RequestStatus.LOADED or self._descriptor is None:
            raise RequestNotLoadedError(
                f"Cannot prompt while request is {self._status.value}"
            )

        descriptor = self._descriptor
        self._status = RequestStatus.PROMPTING
        self._dismissed = asyncio.Event()

        logger.info(f"Prompting for {self.policy.name} request")
        agent_call = asyncio.ensure_future(
            self._agent.open(descriptor.url, self._prompt_options(options))
        )
        dismiss_wait = asyncio.ensure_future(self._dismissed.wait())

        try:
            done, _ = await asyncio.wait(
                {agent_call, dismiss_wait}, return_when=asyncio.FIRST_COMPLETED
            )
        except BaseException:
            await self._stop(agent_call, dismiss_wait)
            self._resolve(AuthorizationCancelled())
            raise

        if agent_call not in done:
            await self._stop(agent_call)
            self._resolve(AuthorizationCancelled())
            return self._result

        await self._stop(dismiss_wait)
        try:
            outcome = agent_call.result()
        except asyncio.CancelledError:
            outcome = AuthorizationCancelled()
        except Exception as e:
            self._resolve(AuthorizationFailure(error=AGENT_ERROR, description=str(e)))
            logger.warning(f"User-agent failed: {e}")
            raise UserAgentError(f"User-agent failed: {e}") from e

        try:
            result = self.classify(descriptor, outcome)
        except UserAgentError as e:
            self._resolve(AuthorizationFailure(error=AGENT_ERROR, description=str(e)))
            raise

        self._resolve(result)
        return result

    def dismiss(self) -> bool:
        """End an in-flight prompt with a cancelled result.

        Returns:
            True if a prompt was running
        """
        if self._status is not RequestStatus.PROMPTING or self._dismissed is None:
            return False
        self._dismissed.set()
        return True

    def classify(
        self, descriptor: AuthorizationRequestDescriptor, outcome: AuthorizationResult
    ) -> AuthorizationResult:
        """Validate a user-agent outcome against the issued request.

        A response whose state does not match the issued state is always a
        failure, whatever else it carries.
        """
        if isinstance(outcome, (AuthorizationCancelled, AuthorizationDismissed)):
            return outcome

        if isinstance(outcome, AuthorizationFailure):
            if outcome.state is not None and outcome.state != descriptor.state:
                logger.warning("State mismatch in error response")
                return AuthorizationFailure(
                    error=STATE_MISMATCH,
                    description=(
                        f"State mismatch in error response: {outcome.error} "
                        f"({outcome.description or ''})"
                    ),
                    params=outcome.params,
                    url=outcome.url,
                )
            return outcome

        if isinstance(outcome, AuthorizationSuccess):
            try:
                validate_state(descriptor.state, outcome.state)
            except StateValidationError as e:
                logger.warning(f"Rejecting authorization response: {e}")
                return AuthorizationFailure(
                    error=STATE_MISMATCH,
                    description=str(e),
                    params=outcome.params,
                    url=outcome.url,
                )

            credential = _CREDENTIAL_PARAMS[descriptor.params.response_type]
            if not outcome.params.get(credential):
                return AuthorizationFailure(
                    error=INVALID_RESPONSE,
                    description=f"Missing {credential} in authorization response",
                    params=outcome.params,
                    url=outcome.url,
                )
            return outcome

        raise UserAgentError(f"Unexpected user-agent outcome: {outcome!r}")

    def _prompt_options(self, options: PromptOptions | None) -> PromptOptions:
        defaults = self.policy.prompt_options
        if options is None:
            return defaults
        return PromptOptions(
            width=options.width if options.width is not None else defaults.width,
            height=options.height if options.height is not None else defaults.height,
            use_embedded_flow=options.use_embedded_flow,
        )

    def _is_current(self) -> bool:
        return (
            self._status is RequestStatus.LOADED
            and self._descriptor is not None
            and self._built_from == (self._config, self._platform)
        )

    def _ensure_not_prompting(self, action: str) -> None:
        if self._status is RequestStatus.PROMPTING:
            raise PromptInProgressError(f"Cannot {action} while a prompt is in progress")

    def _mark_unloaded(self) -> None:
        self._status = RequestStatus.UNLOADED
        self._descriptor = None
        self._built_from = None

    def _resolve(self, result: AuthorizationResult) -> None:
        self._result = result
        self._status = RequestStatus.RESOLVED
        self._dismissed = None
        logger.info(f"Authorization prompt resolved: {result.type}")

    async def _stop(self, *tasks: asyncio.Future) -> None:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
