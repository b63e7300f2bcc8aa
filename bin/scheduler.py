from timewheel import config
from timewheel import service


conf = config.read_default_config()

wheel = service.new_time_wheel(config=conf, autostart=False)

try:
    wheel.run()
except KeyboardInterrupt:
    pass
finally:
    wheel.stop()
