"""
Entry point for the round-trip engine.

Usage:
    python -m roundtrip
    roundtrip  # if installed via pip
"""

import asyncio
import sys


def _install_uvloop() -> bool:
    """Install uvloop as the event loop policy when it is available."""
    try:
        import uvloop
    except ImportError:
        return False

    uvloop.install()
    return True


def main() -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success).
    """
    from pydantic import ValidationError

    from roundtrip import __version__
    from roundtrip.config.settings import get_settings
    from roundtrip.core.engine import RoundTripEngine

    print(
        f"""
╔═══════════════════════════════════════════════════════════════╗
║     JUPITER ROUND-TRIP ARBITRAGE v{__version__:<22}      ║
║                                                               ║
║     A -> B -> A swap loop on Solana                           ║
╚═══════════════════════════════════════════════════════════════╝
    """
    )

    try:
        settings = get_settings()
    except ValidationError as e:
        print(f"Configuration error: {e}")
        print("\nSet at least these in the environment or a .env file:")
        print("  INPUT_MINT_ADDRESS=<base token mint>")
        print("  OUTPUT_MINT_ADDRESS=<intermediate token mint>")
        print("  WALLET_PRIVATE_KEY=<secret>   # only when DRY_RUN=false")
        return 1

    uvloop_enabled = settings.use_uvloop and _install_uvloop()

    print("Configuration:")
    print(f"  Mode:           {'DRY RUN' if settings.dry_run else 'LIVE TRADING'}")
    print(f"  Cluster:        {settings.cluster}")
    print(f"  Input mint:     {settings.input_mint_address}")
    print(f"  Output mint:    {settings.output_mint_address}")
    print(f"  Probe amount:   {settings.in_amount}")
    print(f"  Slippage:       {settings.slippage_bps} bps")
    print(f"  Max hop fee:    {settings.max_fee_pct:.3f}%")
    print(f"  Tx fee:         {settings.tx_fee}")
    print(f"  Min profit:     {settings.min_profit} (retry {settings.min_profit_swap2_retry})")
    print(f"  Profit log:     {settings.profit_log_path}")
    print(f"  uvloop:         {'Enabled' if uvloop_enabled else 'Disabled'}")
    print()

    if not settings.dry_run:
        print("⚠️  WARNING: Live trading mode enabled!")
        print("    Real swaps will be signed and sent.")
        print()

    async def run_engine() -> int:
        engine = RoundTripEngine(settings)

        try:
            await engine.setup()
            await engine.run()
            return 0

        except KeyboardInterrupt:
            print("\nInterrupted by user")
            return 0

        except Exception as e:
            print(f"\nFatal error: {e}")
            import traceback

            traceback.print_exc()
            return 1

        finally:
            await engine.shutdown()

    return asyncio.run(run_engine())


if __name__ == "__main__":
    sys.exit(main())
