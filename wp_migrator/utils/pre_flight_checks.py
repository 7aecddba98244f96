import requests

from wp_migrator.utils.errors import MigrationError


class PreFlightCheckError(MigrationError):
    """Custom exception for pre-flight check failures."""
    pass


def run_wordpress_pre_flight_checks(store) -> None:
    """
    Verifies that the target site is reachable and the credentials are valid.

    Args:
        store: A :class:`~wp_migrator.migrators.wordpress_client.WordPressStore`.

    Raises:
        PreFlightCheckError: If any check fails.
    """
    print("[INFO] Running pre-flight checks...")

    if not store.base_url:
        raise PreFlightCheckError("WordPress base_url not found in the configuration file.")

    # Check 1: Verify the application password against /users/me
    try:
        user = store.current_user()
    except requests.HTTPError as e:
        status = e.response.status_code if e.response is not None else 0
        if status == 401:
            raise PreFlightCheckError("The application password is invalid or the user does not exist.")
        raise PreFlightCheckError(f"Unexpected error checking the users endpoint: {e}")
    except requests.RequestException as e:
        raise PreFlightCheckError(f"Network error connecting to {store.base_url}: {e}")

    print(f"[INFO] Pre-flight checks passed successfully (user: {user.get('name') or user.get('id')}).")
