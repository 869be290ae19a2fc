"""Unit tests for dependencies module."""

from app.core.config import Settings
from app.core.dependencies import get_user_service
from app.services.user_service import UserService


class TestGetUserService:
    """Test get_user_service dependency."""

    def test_builds_service_for_session(self, mock_session):
        """Test the provider wires the request session and settings."""
        settings = Settings()
        service = get_user_service(mock_session, settings)

        assert isinstance(service, UserService)
        assert service.session is mock_session
        assert service.settings is settings

    def test_new_service_per_call(self, mock_session):
        """Test nothing is shared between requests."""
        settings = Settings()
        assert get_user_service(mock_session, settings) is not get_user_service(
            mock_session, settings
        )
