import json
import time

from argparse import ArgumentParser

from timewheel import config
from timewheel import domain
from timewheel import enums
from timewheel import service


ps = ArgumentParser()
ps.add_argument("key", help="task key, needed to cancel the task")
ps.add_argument("url", help="callback url (http:// or https://)")
ps.add_argument("-m", "--method", default=enums.Method.POST.value, help="GET or POST")
ps.add_argument("-d", "--data", default=None, help="json request body")
ps.add_argument("-H", "--header", action="append", default=[], help="header as name:value")
ps.add_argument("-i", "--in", dest="delay", type=int, default=0, help="seconds from now")
ps.add_argument("-a", "--at", type=int, default=None, help="seconds since epoch (overrides --in)")
args = ps.parse_args()

header = {}
for h in args.header:
    name, _, value = h.partition(":")
    header[name.strip()] = value.strip()

execute_at = args.at if args.at is not None else int(time.time()) + args.delay

task = domain.Task.new(
    args.url,
    method=args.method.upper(),
    header=header,
    req=json.loads(args.data) if args.data else None,
)

conf = config.read_default_config()
wheel = service.new_time_wheel(config=conf, autostart=False)

added = wheel.register(args.key, task, execute_at)

print(f"key: {args.key}")
print(f"execute_at: {execute_at}")
print(f"added: {added}")
