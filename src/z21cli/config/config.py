import logging
import os
import platform

from configobj import ConfigObj, ConfigObjError
from configobj.validate import Validator

logger = logging.getLogger(__name__)

# The default extension for configuration files
config_extension = '.cfg'

settings_name = 'z21cli'
settings_directory = os.path.dirname(__file__)


def config_flavor(name, flavor=None):
    """
    >>> config_flavor('z21cli', 'default')
    'z21cli.default'
    >>> config_flavor('z21cli')
    'z21cli'
    """
    return name if not flavor else name + '.' + flavor


def config_filename(name, directory):
    return os.path.join(directory, name + config_extension)


def load_config_file_base(file, must_exist=True):
    """
    Loads a configuration file
    :param file:        The configuration file to load
    :param must_exist:  when True, the file must exist or an exception is thrown.
    :return: The ConfigObj instance for the file.
    """
    try:
        return ConfigObj(file, file_error=must_exist) \
            if must_exist or os.path.exists(file) else ConfigObj()
    except ConfigObjError as e:
        raise type(e)(str(e) + ' at ' + file)


def config_flavor_file(name, directory, subpart=None) -> ConfigObj:
    """
    Loads a specialization of a config file, named after the base followed by a period and the specialization.
    A missing file yields an empty configuration.
    """
    return load_config_file_base(config_filename(config_flavor(name, subpart), directory), False)


def map_os_name(name):
    """
    >>> map_os_name('Windows')
    'windows'
    >>> map_os_name("Darwin")
    'osx'
    """
    name = name.lower()
    if name == 'darwin':
        name = 'osx'
    return name


def os_name():
    return map_os_name(platform.system())


def user_config_file(name):
    return os.path.expanduser('~/' + name + config_extension)


def load_config(name, directory, user_file=None):
    """
        Loads all the configuration files that relate to the given name.
        Configurations are merged in this order, later ones winning:
        - the default specialization
        - the platform specialization
        - the user override
        The result is validated against the "schema" specialization, which also converts the values to their
        declared types.
    :return: the validated ConfigObj
    """
    default_config = config_flavor_file(name, directory, 'default')
    platform_config = config_flavor_file(name, directory, os_name())
    user_config = load_config_file_base(user_file or user_config_file(name), must_exist=False)
    config = ConfigObj(configspec=config_filename(config_flavor(name, 'schema'), directory))
    config.merge(default_config)
    config.merge(platform_config)
    config.merge(user_config)

    result = config.validate(Validator())
    if result is not True:
        raise ConfigObjError("the config file %s failed validation %s" % (name, result))
    return config


def apply_conf(conf, target):
    """
    Sets each attribute of the target that has the same name as a configuration item.
    """
    for k, v in conf.items():
        if hasattr(target, k):
            setattr(target, k, v)


class Settings:
    """ client-wide settings. The class attributes are the built in defaults. """
    request_timeout = 0.5
    scan_timeout = 2.0
    default_host = '127.0.0.1'
    default_port = 21105
    contexts_file = '~/.z21_contexts.cfg'

    @property
    def contexts_path(self):
        return os.path.expanduser(os.environ.get('Z21_CONTEXTS') or self.contexts_file)


def load_settings(user_file=None, directory=settings_directory) -> Settings:
    settings = Settings()
    apply_conf(load_config(settings_name, directory, user_file), settings)
    logger.debug("settings: request_timeout=%ss scan_timeout=%ss contexts=%s"
                 % (settings.request_timeout, settings.scan_timeout, settings.contexts_path))
    return settings
