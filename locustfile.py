from locust import HttpUser, task, between
import random

# Mix of active, empty and malformed addresses
ADDRESSES = [
    "0x742d35Cc6634C0532925a3b844Bc9e7595f0bEb0",
    "0x1db87acbd835b4c905652d100c2dc65bde18fc36",
    "0x0000000000000000000000000000000000000000",
]
BAD_ADDRESSES = ["0x123", "not-an-address"]


class WalletCheckUser(HttpUser):
    wait_time = between(1, 2)

    @task(10)
    def check_wallet(self):
        self.client.get(
            "/check-wallet",
            params={"address": random.choice(ADDRESSES)},
            name="/check-wallet",
        )

    @task(1)
    def check_wallet_invalid(self):
        with self.client.get(
            "/check-wallet",
            params={"address": random.choice(BAD_ADDRESSES)},
            name="/check-wallet [400]",
            catch_response=True,
        ) as resp:
            if resp.status_code == 400:
                resp.success()

    @task(1)
    def preflight(self):
        self.client.options("/check-wallet", name="/check-wallet [OPTIONS]")
