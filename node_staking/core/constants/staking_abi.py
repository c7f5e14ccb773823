from __future__ import annotations

from typing import Any

# Minimal ABIs for the staking contracts (ComputeStaking / NodeStakingManager).

COMPUTE_STAKING_ABI: list[dict[str, Any]] = [
    {
        "type": "function",
        "name": "stakeAsProvider",
        "stateMutability": "payable",
        "inputs": [],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "getStake",
        "stateMutability": "view",
        "inputs": [{"name": "staker", "type": "address"}],
        "outputs": [
            {"name": "amount", "type": "uint256"},
            {"name": "stakeType", "type": "uint8"},
            {"name": "stakedAt", "type": "uint256"},
        ],
    },
    {
        "type": "function",
        "name": "unstake",
        "stateMutability": "nonpayable",
        "inputs": [],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "pendingRewards",
        "stateMutability": "view",
        "inputs": [{"name": "staker", "type": "address"}],
        "outputs": [{"type": "uint256"}],
    },
    {
        "type": "function",
        "name": "claimRewards",
        "stateMutability": "nonpayable",
        "inputs": [],
        "outputs": [{"type": "uint256"}],
    },
]

NODE_STAKING_MANAGER_ABI: list[dict[str, Any]] = [
    {
        "type": "function",
        "name": "getNodeInfo",
        "stateMutability": "view",
        "inputs": [{"name": "operator", "type": "address"}],
        "outputs": [
            {"name": "stakeToken", "type": "address"},
            {"name": "stakeAmount", "type": "uint256"},
            {"name": "rewardToken", "type": "address"},
            {"name": "rpcUrl", "type": "string"},
            {"name": "region", "type": "string"},
            {"name": "registeredAt", "type": "uint256"},
            {"name": "uptime", "type": "uint256"},
            {"name": "requestsServed", "type": "uint256"},
        ],
    },
    {
        "type": "function",
        "name": "pendingRewards",
        "stateMutability": "view",
        "inputs": [{"name": "operator", "type": "address"}],
        "outputs": [{"type": "uint256"}],
    },
    {
        "type": "function",
        "name": "claimRewards",
        "stateMutability": "nonpayable",
        "inputs": [],
        "outputs": [{"type": "uint256"}],
    },
]
