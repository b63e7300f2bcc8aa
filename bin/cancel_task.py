from argparse import ArgumentParser

from timewheel import config
from timewheel import service


ps = ArgumentParser()
ps.add_argument("key", help="task key")
ps.add_argument("at", type=int, help="seconds since epoch the task was registered for")
args = ps.parse_args()

conf = config.read_default_config()
wheel = service.new_time_wheel(config=conf, autostart=False)

count = wheel.cancel(args.key, args.at)

print(f"key: {args.key}")
print(f"tombstones in shard: {count}")
