"""Provider configuration and service client factories.

The configuration is read from ``~/.hwcloud.yaml`` (or the file given to
:func:`load_config`) and overlaid with the ``HW_*`` environment variables::

    region: cn-north-4
    access_key: <AK>
    secret_key: <SK>
    project_id: <optional, looked up through IAM when missing>
    enterprise_project_id: "0"
    cloud: myhuaweicloud.com
    insecure: false
    endpoints:
      dms: https://dms.example.com/
"""

import os
import threading

import yaml

from provider.exceptions import ConfigError, ProviderError
from sdk.auth import AKSKAuth, TokenAuth
from sdk.client import ProviderClient, ServiceClient
from sdk.exceptions import SDKError
from sdk.iam import projects
from utility.log import Log
from utility.utils import load_file

LOG = Log(__name__)

DEFAULT_CONFIG_FILE = os.path.join(os.path.expanduser("~"), ".hwcloud.yaml")
DEFAULT_CLOUD = "myhuaweicloud.com"

ENV_MAPPING = {
    "HW_REGION_NAME": "region",
    "HW_ACCESS_KEY": "access_key",
    "HW_SECRET_KEY": "secret_key",
    "HW_SECURITY_TOKEN": "security_token",
    "HW_AUTH_TOKEN": "token",
    "HW_PROJECT_ID": "project_id",
    "HW_DOMAIN_ID": "domain_id",
    "HW_ENTERPRISE_PROJECT_ID": "enterprise_project_id",
    "HW_CLOUD": "cloud",
    "HW_INSECURE": "insecure",
}

# service name -> (catalog name, resource base relative to the endpoint)
SERVICES = {
    "dms": ("dms", "v2/{project_id}/"),
    "apig": ("apig", "v2/{project_id}/"),
    "dds": ("dds", "v3/{project_id}/"),
    "ims": ("ims", "v2/"),
    "iam": ("iam", ""),
}


class Config(object):
    """Provider level settings shared by every resource operation."""

    def __init__(
        self,
        region="",
        access_key="",
        secret_key="",
        security_token="",
        token="",
        project_id="",
        domain_id="",
        enterprise_project_id="",
        cloud=DEFAULT_CLOUD,
        insecure=False,
        endpoints=None,
    ):
        if not region:
            raise ConfigError("region is required, set it in the config or HW_REGION_NAME")
        if not token and not (access_key and secret_key):
            raise ConfigError(
                "either token or both access_key and secret_key must be configured"
            )

        self.region = region
        self.access_key = access_key
        self.secret_key = secret_key
        self.security_token = security_token
        self.token = token
        self.domain_id = domain_id
        self.enterprise_project_id = enterprise_project_id
        self.cloud = cloud or DEFAULT_CLOUD
        self.insecure = insecure
        self.endpoints = dict(endpoints or {})

        self._project_ids = {}
        if project_id:
            self._project_ids[region] = project_id
        self._clients = {}
        self._lock = threading.Lock()

    def __repr__(self):
        return f"<Config region={self.region} cloud={self.cloud}>"

    def _auth(self):
        if self.token:
            return TokenAuth(self.token)
        return AKSKAuth(self.access_key, self.secret_key, self.security_token or None)

    def endpoint(self, service, region):
        """Return the endpoint of a service, honouring configured overrides."""
        if service in self.endpoints:
            return self.endpoints[service]
        catalog = SERVICES[service][0]
        if service == "iam":
            return f"https://{catalog}.{self.cloud}/"
        return f"https://{catalog}.{region}.{self.cloud}/"

    def _provider_client(self, region, project_id=None):
        return ProviderClient(
            self._auth(),
            region,
            project_id=project_id,
            domain_id=self.domain_id,
            insecure=self.insecure,
        )

    def project_id(self, region):
        """Return the project ID of a region, querying IAM on first use.

        Raises:
            ConfigError     when no project is named after the region
        """
        if region in self._project_ids:
            return self._project_ids[region]

        client = ServiceClient(
            self._provider_client(region),
            self.endpoint("iam", region),
            service_type="iam",
        )
        try:
            found = projects.list_projects(client, name=region)
        except SDKError as e:
            raise ConfigError(f"failed to query the project of region {region}: {e}")

        if not found:
            raise ConfigError(f"no project found for region {region}")

        self._project_ids[region] = found[0].id
        LOG.info(f"Using project {found[0].id} for region {region}")
        return found[0].id

    def service_client(self, service, region=None):
        """Return the cached client of a service in a region."""
        region = region or self.region
        key = (service, region)
        with self._lock:
            if key in self._clients:
                return self._clients[key]

        project_id = None
        base = SERVICES[service][1]
        if "{project_id}" in base:
            project_id = self.project_id(region)
            base = base.format(project_id=project_id)

        endpoint = self.endpoint(service, region)
        client = ServiceClient(
            self._provider_client(region, project_id),
            endpoint,
            resource_base=endpoint.rstrip("/") + "/" + base if base else None,
            service_type=SERVICES[service][0],
        )

        with self._lock:
            self._clients[key] = client
        return client

    def dms_v2_client(self, region=None):
        return self.service_client("dms", region)

    def apig_v2_client(self, region=None):
        return self.service_client("apig", region)

    def dds_v3_client(self, region=None):
        return self.service_client("dds", region)

    def ims_v2_client(self, region=None):
        return self.service_client("ims", region)

    def iam_v3_client(self, region=None):
        return self.service_client("iam", region)

    def get_region(self, d):
        """Return the region of the resource, the provider region when unset."""
        if "region" in d.resource.schema:
            region, ok = d.get_ok("region")
            if ok:
                return region
        return self.region

    def get_enterprise_project_id(self, d):
        if "enterprise_project_id" in d.resource.schema:
            value, ok = d.get_ok("enterprise_project_id")
            if ok:
                return value
        return self.enterprise_project_id


def _to_bool(value):
    if isinstance(value, bool):
        return value
    return str(value).lower() in ("1", "true", "yes")


def load_config(path=None, environ=None):
    """
    Build the provider configuration from the YAML file and the environment.

    Environment variables take precedence over the file content. A missing file
    is not an error as long as the environment carries the settings.

    Args:
        path (str): configuration file, ~/.hwcloud.yaml by default
        environ (dict): environment to read, os.environ by default

    Returns:
        Config

    Raises:
        ConfigError     when the file is invalid or required settings are missing
    """
    path = path or DEFAULT_CONFIG_FILE
    environ = os.environ if environ is None else environ

    settings = {}
    try:
        settings = load_file(path)
    except FileNotFoundError:
        LOG.debug(f"No provider configuration at {path}, using the environment")
    except yaml.YAMLError as e:
        raise ConfigError(f"failed to parse {path}: {e}")

    if not isinstance(settings, dict):
        raise ConfigError(f"{path} must contain a mapping")

    for env, key in ENV_MAPPING.items():
        if environ.get(env):
            settings[key] = environ[env]

    settings["insecure"] = _to_bool(settings.get("insecure", False))
    unknown = set(settings) - set(ENV_MAPPING.values()) - {"endpoints"}
    if unknown:
        raise ConfigError(f"unknown settings in {path}: {', '.join(sorted(unknown))}")

    try:
        return Config(**settings)
    except ProviderError:
        raise
    except TypeError as e:
        raise ConfigError(f"invalid provider configuration: {e}")
