"""
Application call transactions.
"""

from typing import Iterable, Optional

from algotx.core.transaction import (
    ApplicationCallFields,
    OnComplete,
    StateSchema,
    TransactionType,
)
from algotx.tx.builder import AddressLike, TransactionBuilder, to_address


class ApplicationCallTransactionBuilder(TransactionBuilder):
    """
    Builds application create, call, update and delete transactions.

    Leaving app_id unset creates an application; approval and clear
    programs are then required and the state schemas may be declared.
    """

    TYPE = TransactionType.APPLICATION_CALL
    FIELDS = ApplicationCallFields

    def app_id(self, app_id: Optional[int]) -> "ApplicationCallTransactionBuilder":
        return self._set("app_id", app_id)

    def on_complete(self, action: Optional[OnComplete]) -> "ApplicationCallTransactionBuilder":
        if action is not None:
            action = OnComplete(action)
        return self._set("on_complete", action)

    def approval_program(self, program: Optional[bytes]) -> "ApplicationCallTransactionBuilder":
        return self._set("approval_program", program)

    def clear_program(self, program: Optional[bytes]) -> "ApplicationCallTransactionBuilder":
        return self._set("clear_program", program)

    def app_args(self, args: Optional[Iterable[bytes]]) -> "ApplicationCallTransactionBuilder":
        return self._set("app_args", tuple(args or ()))

    def accounts(self, accounts: Optional[Iterable[AddressLike]]) -> "ApplicationCallTransactionBuilder":
        return self._set("accounts", tuple(to_address(a) for a in accounts or ()))

    def foreign_apps(self, app_ids: Optional[Iterable[int]]) -> "ApplicationCallTransactionBuilder":
        return self._set("foreign_apps", tuple(app_ids or ()))

    def foreign_assets(self, asset_ids: Optional[Iterable[int]]) -> "ApplicationCallTransactionBuilder":
        return self._set("foreign_assets", tuple(asset_ids or ()))

    def global_schema(self, schema: Optional[StateSchema]) -> "ApplicationCallTransactionBuilder":
        return self._set("global_schema", schema)

    def local_schema(self, schema: Optional[StateSchema]) -> "ApplicationCallTransactionBuilder":
        return self._set("local_schema", schema)

    def extra_pages(self, pages: Optional[int]) -> "ApplicationCallTransactionBuilder":
        """Additional 2KB program pages, creation only."""
        return self._set("extra_pages", pages)
