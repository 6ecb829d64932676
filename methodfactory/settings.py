from decouple import config

# default caching mode of MethodInvokingFactory and PropertiesFactory
MF_DEFAULT_SINGLETON = config("MF_DEFAULT_SINGLETON", default=True, cast=bool)

# use pydantic strict mode when coercing arguments
MF_STRICT_CONVERSION = config("MF_STRICT_CONVERSION", default=False, cast=bool)

# allow invoking methods whose name starts with a single underscore
MF_ALLOW_PRIVATE_METHODS = config("MF_ALLOW_PRIVATE_METHODS", default=False, cast=bool)

MF_LOG_LEVEL = config("MF_LOG_LEVEL", default="WARNING")
