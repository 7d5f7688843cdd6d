import os
import sys

# Add src to path for running directly
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "../src")))

import anyio

from esia_sso import EsiaClientAsync, EsiaConfig, TokenExchangeError


async def main() -> None:
    """
    Demonstrates the ESIA login flow against the test portal.

    Reads the client certificate and key from the paths in ESIA_CERT_FILE / ESIA_KEY_FILE,
    prints the authorization URL, then exchanges the code pasted back from the redirect.
    """
    with open(os.environ["ESIA_CERT_FILE"]) as f:
        certificate = f.read()
    with open(os.environ["ESIA_KEY_FILE"]) as f:
        key = f.read()

    config = EsiaConfig(
        esia_url="https://esia-portal1.test.gosuslugi.ru",
        client_id=os.environ.get("ESIA_CLIENT_ID", "TEST_CLIENT"),
        redirect_uri="http://localhost:8000/esia/callback",
        scope="openid fullname email",
        certificate=certificate,
        key=key,
    )

    async with EsiaClientAsync(config) as client:
        auth = client.create_auth()
        print(">>> Open this URL and log in:")
        print(auth.url)
        print(f">>> Keep state to check the callback: {auth.state}")

        code = input(">>> Paste the 'code' parameter from the redirect: ").strip()

        try:
            result = await client.get_access(code, ["", "/ctts"])
        except TokenExchangeError as e:
            print(f">>> Exchange failed: {e}")
            return

        print(f">>> Subject: {result.claims.get('urn:esia:sbj_id')}")
        for item in result.data:
            print(item)


if __name__ == "__main__":
    anyio.run(main)
