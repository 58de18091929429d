from payrolltax.cli import main

if __name__ == "__main__":  # pragma: no cover - CLI invocation
    raise SystemExit(main())
