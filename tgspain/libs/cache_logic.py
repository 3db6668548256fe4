from django.core.cache import caches

DEFAULT = "default"
PERSISTENT = "filesystem"


def cache_fxn_key(fxn, key, cache_name, *args, **kwargs):
    """Read `key` from the named cache, computing it with `fxn` on a miss.

    PlatformSettings.get stores each setting under its own key and saving a
    setting calls invalidate_cache for that key.
    """
    if key not in caches[cache_name]:
        result = fxn(*args, **kwargs)
        caches[cache_name].set(key, result)
        return result
    else:
        return caches[cache_name].get(key)


def invalidate_cache(key, cache_name=DEFAULT):
    caches[cache_name].delete(key)


def clear_cache():
    caches[DEFAULT].clear()
    caches[PERSISTENT].clear()
