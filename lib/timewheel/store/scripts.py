"""Lua scripts run by redis. Redis runs a script start to finish without interleaving any other
command, which is the only thing that keeps concurrent schedulers from stepping on each other.

Every key a script touches is passed in KEYS so redis cluster can check they share a slot.

"""

# KEYS: data, marker  ARGV: score, task, task key
# Registering clears any tombstone for the key, so a re-register after a cancel wins.
REGISTER = """
local dataKey = KEYS[1]
local markerKey = KEYS[2]
local score = ARGV[1]
local task = ARGV[2]
local taskKey = ARGV[3]
redis.call('srem', markerKey, taskKey)
return redis.call('zadd', dataKey, score, task)
"""

# KEYS: marker  ARGV: task key, ttl
# The ttl is set whenever the set ends up with exactly one member (including a repeat cancel of
# that member); cancels into a set holding other keys don't extend it.
CANCEL = """
local markerKey = KEYS[1]
local taskKey = ARGV[1]
local ttl = ARGV[2]
redis.call('sadd', markerKey, taskKey)
local count = redis.call('scard', markerKey)
if tonumber(count) == 1 then
    redis.call('expire', markerKey, ttl)
end
return count
"""

# KEYS: data, marker  ARGV: low, high (inclusive)
# Reply is {tombstones, entry, entry, ...}. Claimed entries are removed in the same call, so
# nobody else can claim them.
POLL_AND_CLAIM = """
local dataKey = KEYS[1]
local markerKey = KEYS[2]
local low = ARGV[1]
local high = ARGV[2]
local tombstones = redis.call('smembers', markerKey)
local entries = redis.call('zrangebyscore', dataKey, low, high)
redis.call('zremrangebyscore', dataKey, low, high)
local reply = {tombstones}
for _, v in ipairs(entries) do
    reply[#reply + 1] = v
end
return reply
"""
