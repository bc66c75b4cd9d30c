# src/retro_evm/arch/evm/__init__.py
"""
EVM Architecture Package
"""
from .cpu import EvmCpu
from .state import EvmCpuState
