"""
retro-evm: タグ付きオペランドを持つ小さなバイトアドレッシング仮想マシン。
"""
__version__ = "0.1.0"
