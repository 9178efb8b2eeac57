import sys

import anyio

from coreason_okta_oauth import OktaStrategy, OktaStrategyConfig, UserProfile


def verify(access_token: str, refresh_token: str | None, params: dict[str, object], profile: UserProfile) -> str:
    # A real application would look up or create the local user here
    return profile.username or profile.id or "anonymous"


async def main() -> None:
    """
    Walks through the authorization-code flow against an Okta tenant.

    Configure with COREASON_OKTA_AUDIENCE, COREASON_OKTA_CLIENT_ID, COREASON_OKTA_CLIENT_SECRET
    and COREASON_OKTA_CALLBACK_URL. Without arguments the script prints the URL to open;
    pass the `code` from the callback redirect to finish the login.
    """
    config = OktaStrategyConfig(scope=["openid", "profile", "email"], state=True)  # type: ignore[call-arg]

    async with OktaStrategy(config, verify) as strategy:
        if len(sys.argv) < 2:
            print(">>> Open this URL and copy the `code` query parameter from the redirect:")
            print(strategy.create_authorization_url())
            return

        user = await strategy.authenticate(sys.argv[1])
        print(f">>> Logged in as {user}")


if __name__ == "__main__":
    anyio.run(main)
