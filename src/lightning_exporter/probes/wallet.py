from __future__ import annotations

from .probe_base import ProbeBase


class WalletBalanceProbe(ProbeBase):
    NAME = "wallet_balance"
    RPC = "WalletBalance"

    def collect(self, client, catalog):
        balance = client.wallet_balance()
        return [
            catalog.sample("wallet_balance_sats", balance.unconfirmed_balance, "unconfirmed"),
            catalog.sample("wallet_balance_sats", balance.confirmed_balance, "confirmed"),
        ]
