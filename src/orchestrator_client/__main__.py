"""Entry point for running orchestrator_client as a module."""
from orchestrator_client.cli.main import run

if __name__ == "__main__":
    run()
