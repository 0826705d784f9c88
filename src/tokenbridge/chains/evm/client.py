"""
web3.py adapters for the Provider and Signer collaborators.

``Web3Provider`` answers queries and dry-runs through an ``AsyncWeb3``
instance; ``Web3Signer`` signs locally with an eth-account key and waits for
the receipt. Both translate ``ContractCall`` through the ABI fragments in
``abi.py``.
"""

from typing import Any, Mapping, Optional

from eth_account.signers.local import LocalAccount
from web3 import AsyncWeb3, Web3
from web3.exceptions import TransactionNotFound

from ...logging import LogContext, get_logger
from ...providers import (
    ContractCall,
    Provider,
    ReceiptLog,
    Signer,
    TransactionReceipt,
)
from .abi import ABIS

logger = get_logger(__name__)


def contract_function(w3: AsyncWeb3, call: ContractCall):
    """Bind a ContractCall to a web3 contract function."""
    contract = w3.eth.contract(
        address=Web3.to_checksum_address(call.contract), abi=ABIS[call.interface]
    )
    return getattr(contract.functions, call.method)(*call.args)


def transaction_params(call: ContractCall) -> dict:
    params = {"value": call.value}
    if call.sender:
        params["from"] = Web3.to_checksum_address(call.sender)
    return params


def receipt_from_web3(raw: Mapping[str, Any], chain: str) -> TransactionReceipt:
    """Convert a web3 receipt into a chain-neutral TransactionReceipt."""
    logs = tuple(
        ReceiptLog(
            address=log["address"],
            topics=tuple(bytes(topic) for topic in log["topics"]),
            data=bytes(log["data"]),
        )
        for log in raw.get("logs", [])
    )
    return TransactionReceipt(
        tx_hash=Web3.to_hex(raw["transactionHash"]),
        chain=chain,
        sender=raw["from"],
        block_number=raw["blockNumber"],
        status=raw.get("status", 1) == 1,
        logs=logs,
        gas_used=raw.get("gasUsed"),
        effective_gas_price=raw.get("effectiveGasPrice"),
    )


class Web3Provider(Provider):
    """Read-only access to an EVM chain."""

    def __init__(self, w3: AsyncWeb3, chain: str):
        self.w3 = w3
        self.chain = chain

    async def query(self, call: ContractCall) -> Any:
        return await contract_function(self.w3, call).call(transaction_params(call))

    async def simulate(self, call: ContractCall) -> Any:
        # eth_call as the sender; reverts surface as ContractLogicError
        return await contract_function(self.w3, call).call(transaction_params(call))

    async def get_transaction_receipt(self, tx_hash: str) -> Optional[TransactionReceipt]:
        try:
            raw = await self.w3.eth.get_transaction_receipt(tx_hash)
        except TransactionNotFound:
            return None
        return receipt_from_web3(raw, self.chain)

    async def get_balance(self, address: str) -> int:
        return await self.w3.eth.get_balance(Web3.to_checksum_address(address))

    async def get_block_number(self) -> int:
        return await self.w3.eth.block_number


class Web3Signer(Signer):
    """Signs EVM transactions with a local eth-account key."""

    def __init__(
        self,
        w3: AsyncWeb3,
        account: LocalAccount,
        chain: str,
        receipt_timeout: float = 120,
    ):
        self.w3 = w3
        self.account = account
        self.chain = chain
        self.receipt_timeout = receipt_timeout

    async def get_address(self) -> str:
        return self.account.address

    async def send_transaction(self, call: ContractCall) -> TransactionReceipt:
        call = call.with_sender(self.account.address)
        params = transaction_params(call)
        params["nonce"] = await self.w3.eth.get_transaction_count(self.account.address)
        tx = await contract_function(self.w3, call).build_transaction(params)

        signed = self.account.sign_transaction(tx)
        tx_hash = await self.w3.eth.send_raw_transaction(signed.raw_transaction)
        logger.info(
            f"Submitted {call.interface}.{call.method}: {Web3.to_hex(tx_hash)}",
            context=LogContext(
                component="web3_signer",
                operation=call.method,
                chain=self.chain,
                tx_hash=Web3.to_hex(tx_hash),
            ),
        )
        raw = await self.w3.eth.wait_for_transaction_receipt(
            tx_hash, timeout=self.receipt_timeout
        )
        return receipt_from_web3(raw, self.chain)
