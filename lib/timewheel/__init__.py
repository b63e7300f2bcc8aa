"""timewheel: a redis backed, distributed delayed-task scheduler.

Tasks are kept in per-minute redis sorted sets scored by the second they should fire at.
Any number of scheduler instances poll the same redis; a lua script claims (removes) the
current second's tasks atomically so each task is handed out once.

"""
