from pod_restarter.main import main

if __name__ == "__main__":
    raise SystemExit(main())
