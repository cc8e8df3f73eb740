"""
Named connection profiles, stored in a ConfigObj file:

    current = home

    [home]
    host = 192.168.0.111
    port = 21105
    local_host = 0.0.0.0
    local_port = 21106

The local endpoint, when present, is the session descriptor used to resume the profile's session.
"""
import logging
import os

from configobj import ConfigObj, ConfigObjError, flatten_errors
from configobj.validate import Validator

from z21cli.errors import ProfileError
from z21cli.support.mixins import CommonEqualityMixin, StringerMixin

logger = logging.getLogger(__name__)

profiles_schema = """
current = string(default='')
[__many__]
host = string
port = integer(min=1, max=65535)
local_host = string(default=None)
local_port = integer(min=1, max=65535, default=None)
""".splitlines()


class SessionDescriptor(CommonEqualityMixin, StringerMixin):
    """ The local endpoint a profile's session was established from. """
    def __init__(self, local_host, local_port):
        self.local_host = local_host
        self.local_port = local_port


class Profile(CommonEqualityMixin, StringerMixin):
    def __init__(self, name, host, port, session: SessionDescriptor = None):
        self.name = name
        self.host = host
        self.port = port
        self.session = session


class ProfileStore:
    """
    Reads and writes the profiles file. Every operation re-reads the file so that separate invocations
    see each other's changes.
    :param path: the location of the profiles file. It need not exist yet.
    """

    def __init__(self, path):
        self.path = path

    def _read(self):
        """ :return: (current profile name, list of profiles in file order) """
        try:
            config = ConfigObj(self.path, configspec=profiles_schema, file_error=False)
        except ConfigObjError as e:
            raise ProfileError("unable to read %s: %s" % (self.path, e)) from e
        result = config.validate(Validator(), preserve_errors=True)
        if result is not True:
            problems = ["%s: %s" % ('.'.join(sections + [key or '']), error or 'missing')
                        for sections, key, error in flatten_errors(config, result)]
            raise ProfileError("invalid profiles file %s: %s" % (self.path, '; '.join(problems)))
        profiles = []
        for name in config.sections:
            section = config[name]
            session = None
            if section['local_port'] is not None:
                session = SessionDescriptor(section['local_host'] or '', section['local_port'])
            profiles.append(Profile(name, section['host'], section['port'], session))
        return config['current'], profiles

    def _write(self, current, profiles):
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        config = ConfigObj()
        config.filename = self.path
        config['current'] = current or ''
        for p in profiles:
            section = {'host': p.host, 'port': p.port}
            if p.session is not None:
                section['local_host'] = p.session.local_host
                section['local_port'] = p.session.local_port
            config[p.name] = section
        config.write()

    @staticmethod
    def _find(profiles, name):
        for p in profiles:
            if p.name == name:
                return p
        return None

    def profiles(self):
        return self._read()[1]

    @property
    def current_name(self):
        return self._read()[0]

    def add(self, name, host, port):
        """ Adds a profile without a session. The first profile added becomes the current one. """
        if name == 'current':
            raise ProfileError("%r is a reserved name" % name)
        current, profiles = self._read()
        if self._find(profiles, name):
            raise ProfileError("context %r already exists" % name)
        profiles.append(Profile(name, host, port))
        if len(profiles) == 1:
            current = name
        self._write(current, profiles)
        return profiles[-1]

    def use(self, name):
        _, profiles = self._read()
        if not self._find(profiles, name):
            raise ProfileError("context %r not found" % name)
        self._write(name, profiles)

    def remove(self, name):
        current, profiles = self._read()
        profile = self._find(profiles, name)
        if not profile:
            raise ProfileError("context %r not found" % name)
        profiles.remove(profile)
        self._write('' if current == name else current, profiles)

    def load(self, name) -> Profile:
        profile = self._find(self.profiles(), name)
        if not profile:
            raise ProfileError("context %r not found in saved contexts" % name)
        return profile

    def load_current(self) -> Profile:
        current, profiles = self._read()
        if not current:
            raise ProfileError("no current context set, run `z21 ctx use <NAME>` first")
        profile = self._find(profiles, current)
        if not profile:
            raise ProfileError("current context %r not found in saved contexts" % current)
        return profile

    def save(self, name, session: SessionDescriptor = None):
        """ Replaces the session descriptor of a profile. None clears it. """
        current, profiles = self._read()
        profile = self._find(profiles, name)
        if not profile:
            raise ProfileError("context %r not found in saved contexts" % name)
        profile.session = session
        self._write(current, profiles)
        logger.debug("context %s: session %s" % (name, "saved" if session else "cleared"))
