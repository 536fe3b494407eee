import sys
import logging
import signal
from dotenv import load_dotenv
from util.kms import RefreshScheduler, create_kms_cache

load_dotenv()

# Initialize logging
logger = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO)


def main():
    mode = sys.argv[1] if len(sys.argv) > 1 else "schedule"

    scheduler = RefreshScheduler(create_kms_cache())

    if mode == "once":
        print("Refreshing KMS keywords once...")
        if not scheduler.run_once():
            sys.exit(1)

    elif mode == "schedule":
        print(f"Refreshing KMS keywords every {scheduler.interval}s...")
        signal.signal(signal.SIGTERM, lambda *_: scheduler.stop())
        scheduler.start()
        try:
            while scheduler.is_running:
                signal.pause()
        except KeyboardInterrupt:
            scheduler.stop()

    else:
        raise ValueError(f"Unknown mode: {mode}")


if __name__ == "__main__":
    main()
