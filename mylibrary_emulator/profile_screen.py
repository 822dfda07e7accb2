import logging
from datetime import datetime, timezone
from typing import Callable, Dict, Optional

from .enums import ProfileState
from .library_service import LibraryService, UserStats
from .state import AuthState, ToastState

logger = logging.getLogger(__name__)

LOAD_ERROR = "Error loading profile data. Check your connection."


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ProfileController:
    """
    State machine behind the profile screen.

    ``loading -> success | error``. From ``success`` the edit and logout
    dialogs open; each resolves back to ``success``, or stays open with an
    error toast when the backend call fails. Edits are merged without any
    version check, so the last write wins.
    """

    def __init__(
        self,
        service: LibraryService,
        auth: AuthState,
        toasts: ToastState,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.service = service
        self.auth = auth
        self.toasts = toasts
        self.clock = clock

        self.state = ProfileState.LOADING
        self.stats: Optional[UserStats] = None
        self.error: Optional[str] = None
        self.edit_form: Dict[str, str] = {"nombre": "", "apellido": "", "bio": ""}

    def _require(self, *states: ProfileState) -> None:
        if self.state not in states:
            raise RuntimeError(f"Invalid action in profile state '{self.state.value}'")

    # ------------------------------------------------------------------ #
    # Loading                                                            #
    # ------------------------------------------------------------------ #

    async def load(self) -> ProfileState:
        self.state = ProfileState.LOADING
        self.error = None
        if self.auth.user is None:
            self.state = ProfileState.SUCCESS
            return self.state

        result = await self.service.get_user_stats(self.auth.user.uid)
        if result.success:
            self.stats = result.data
            self.state = ProfileState.SUCCESS
        else:
            logger.error(f"Profile load failed: {result.error}")
            self.error = LOAD_ERROR
            self.state = ProfileState.ERROR
        return self.state

    refresh = load
    retry = load

    # ------------------------------------------------------------------ #
    # Dialogs                                                            #
    # ------------------------------------------------------------------ #

    def open_edit_dialog(self) -> None:
        self._require(ProfileState.SUCCESS)
        profile = self.auth.profile
        self.edit_form = {
            "nombre": (profile.first_name if profile else "") or "",
            "apellido": (profile.last_name if profile else "") or "",
            "bio": (profile.bio if profile else "") or "",
        }
        self.state = ProfileState.EDIT_DIALOG

    def open_logout_dialog(self) -> None:
        self._require(ProfileState.SUCCESS)
        self.state = ProfileState.LOGOUT_DIALOG

    def cancel_dialog(self) -> None:
        self._require(ProfileState.EDIT_DIALOG, ProfileState.LOGOUT_DIALOG)
        self.state = ProfileState.SUCCESS

    async def submit_edit(
        self,
        nombre: Optional[str] = None,
        apellido: Optional[str] = None,
        bio: Optional[str] = None,
    ) -> bool:
        """
        Save the edit form. Only the given fields are written, trimmed,
        together with a client-side ``fechaActualizacion``.
        """
        self._require(ProfileState.EDIT_DIALOG)
        if self.auth.user is None:
            return False

        fields = {}
        for key, value in (("nombre", nombre), ("apellido", apellido), ("bio", bio)):
            if value is not None:
                self.edit_form[key] = value
                fields[key] = value.strip()
        fields["fechaActualizacion"] = self.clock().isoformat()

        result = await self.service.update_user_profile(self.auth.user.uid, fields)
        if not result.success:
            self.toasts.show_error("Error updating profile")
            return False

        self.state = ProfileState.SUCCESS
        self.toasts.show_success("Profile updated")
        await self.auth.reload_profile()
        await self.load()
        return True

    async def confirm_logout(self) -> bool:
        self._require(ProfileState.LOGOUT_DIALOG)
        self.state = ProfileState.SUCCESS
        result = await self.auth.logout()
        if result.success:
            self.toasts.show_success("Signed out")
            return True
        self.toasts.show_error(result.error or "Error signing out")
        return False

    # ------------------------------------------------------------------ #
    # Display helpers                                                    #
    # ------------------------------------------------------------------ #

    def initials(self) -> str:
        profile, user = self.auth.profile, self.auth.user
        first = (profile.first_name if profile else "") or (
            (user.display_name or user.email) if user else ""
        )
        last = (profile.last_name if profile else "") or ""
        if last:
            return f"{first[:1]}{last[:1]}".upper()
        return first[:1].upper() or "?"

    def full_name(self) -> str:
        profile, user = self.auth.profile, self.auth.user
        first = (profile.first_name if profile else "") or ""
        last = (profile.last_name if profile else "") or ""
        if first and last:
            return f"{first} {last}"
        if first:
            return first
        if user is not None and user.display_name:
            return user.display_name
        return "User"
