"""
ABI fragments of the contracts the EVM backend talks to.

Only the functions and events the bridge core calls are listed.
"""

from typing import Any, Dict, List

from web3 import Web3

LOG_MESSAGE_PUBLISHED = "LogMessagePublished(address,uint64,uint32,bytes,uint8)"
LOG_MESSAGE_PUBLISHED_TOPIC = bytes(Web3.keccak(text=LOG_MESSAGE_PUBLISHED))

# non-indexed fields of LogMessagePublished, in data order
LOG_MESSAGE_PUBLISHED_DATA = ["uint64", "uint32", "bytes", "uint8"]


def _fn(
    name: str,
    inputs: List[tuple],
    outputs: List[str] = (),
    mutability: str = "view",
) -> Dict[str, Any]:
    return {
        "type": "function",
        "name": name,
        "stateMutability": mutability,
        "inputs": [{"name": arg, "type": kind} for arg, kind in inputs],
        "outputs": [{"name": "", "type": kind} for kind in outputs],
    }


ERC20_ABI = [
    _fn("decimals", [], ["uint8"]),
    _fn("symbol", [], ["string"]),
    _fn("balanceOf", [("account", "address")], ["uint256"]),
    _fn("allowance", [("owner", "address"), ("spender", "address")], ["uint256"]),
    _fn(
        "approve",
        [("spender", "address"), ("amount", "uint256")],
        ["bool"],
        "nonpayable",
    ),
]

TOKEN_BRIDGE_ABI = [
    _fn("wrappedAsset", [("tokenChainId", "uint16"), ("tokenAddress", "bytes32")], ["address"]),
    _fn("WETH", [], ["address"]),
    _fn("isTransferCompleted", [("hash", "bytes32")], ["bool"]),
    _fn(
        "transferTokens",
        [
            ("token", "address"),
            ("amount", "uint256"),
            ("recipientChain", "uint16"),
            ("recipient", "bytes32"),
            ("arbiterFee", "uint256"),
            ("nonce", "uint32"),
        ],
        ["uint64"],
        "payable",
    ),
    _fn(
        "wrapAndTransferETH",
        [
            ("recipientChain", "uint16"),
            ("recipient", "bytes32"),
            ("arbiterFee", "uint256"),
            ("nonce", "uint32"),
        ],
        ["uint64"],
        "payable",
    ),
    _fn(
        "transferTokensWithPayload",
        [
            ("token", "address"),
            ("amount", "uint256"),
            ("recipientChain", "uint16"),
            ("recipient", "bytes32"),
            ("nonce", "uint32"),
            ("payload", "bytes"),
        ],
        ["uint64"],
        "payable",
    ),
    _fn(
        "wrapAndTransferETHWithPayload",
        [
            ("recipientChain", "uint16"),
            ("recipient", "bytes32"),
            ("nonce", "uint32"),
            ("payload", "bytes"),
        ],
        ["uint64"],
        "payable",
    ),
    _fn("completeTransfer", [("encodedVm", "bytes")], [], "nonpayable"),
]

TOKEN_BRIDGE_RELAYER_ABI = [
    _fn(
        "calculateRelayerFee",
        [("targetChainId", "uint16"), ("token", "address"), ("decimals", "uint8")],
        ["uint256"],
    ),
    _fn("calculateMaxSwapAmountIn", [("token", "address")], ["uint256"]),
    _fn(
        "calculateNativeSwapAmountOut",
        [("token", "address"), ("toNativeAmount", "uint256")],
        ["uint256"],
    ),
    _fn(
        "transferTokensWithRelay",
        [
            ("token", "address"),
            ("amount", "uint256"),
            ("toNativeTokenAmount", "uint256"),
            ("targetChain", "uint16"),
            ("targetRecipient", "bytes32"),
            ("batchId", "uint32"),
        ],
        ["uint64"],
        "payable",
    ),
    _fn(
        "wrapAndTransferEthWithRelay",
        [
            ("toNativeTokenAmount", "uint256"),
            ("targetChain", "uint16"),
            ("targetRecipient", "bytes32"),
            ("batchId", "uint32"),
        ],
        ["uint64"],
        "payable",
    ),
]

ABIS = {
    "ERC20": ERC20_ABI,
    "TokenBridge": TOKEN_BRIDGE_ABI,
    "TokenBridgeRelayer": TOKEN_BRIDGE_RELAYER_ABI,
}
