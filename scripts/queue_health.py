"""Basic Redis queue health/visibility script.

Shows the list key, pending length, and the job at the head of the queue.

Usage:
  python scripts/queue_health.py --queue sla:jobs
"""
import sys
import argparse
from pathlib import Path
from dotenv import load_dotenv

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

load_dotenv()

from sla_monitor.exceptions import BrokerUnavailable
from sla_monitor.infrastructure.queue.adapters.redis_list_queue import RedisListQueueBroker
from sla_monitor.tools.redis import config as rconf


def main():
    p = argparse.ArgumentParser()
    p.add_argument('--queue', default=rconf.QUEUE_JOBS)
    args = p.parse_args()

    q = RedisListQueueBroker()
    print('Key:', q._key(args.queue))
    try:
        print('Length:', q.length(args.queue))
        print('Head:', q.peek(args.queue))
    except BrokerUnavailable as e:
        print('redis error:', e)
        return 1
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
