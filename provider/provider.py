"""Registry of the resource and data source types served by the provider."""

from provider.config import load_config
from provider.exceptions import ProviderError
from provider.services.apig.environment import resource_apig_environment
from provider.services.apig.group import resource_apig_group
from provider.services.dds.instances_data_source import data_source_dds_instances
from provider.services.dms.rabbitmq_instance import resource_dms_rabbitmq_instance
from provider.services.ims.images_data_source import data_source_images_images

RESOURCES = {
    "huaweicloud_dms_rabbitmq_instance": resource_dms_rabbitmq_instance,
    "huaweicloud_apig_group": resource_apig_group,
    "huaweicloud_apig_environment": resource_apig_environment,
}

DATA_SOURCES = {
    "huaweicloud_dds_instances": data_source_dds_instances,
    "huaweicloud_images_images": data_source_images_images,
}


class Provider(object):
    """
    Resource definitions of the provider bound to a configuration.

    Args:
        config (Config): provider settings, passed as ``meta`` to every callback
        resources (dict): type name -> factory, the built-in types when None
        data_sources (dict): type name -> factory, the built-in types when None
    """

    def __init__(self, config, resources=None, data_sources=None):
        self.meta = config
        if resources is None:
            resources = RESOURCES
        if data_sources is None:
            data_sources = DATA_SOURCES

        self._resources = {name: factory() for name, factory in resources.items()}
        self._data_sources = {name: factory() for name, factory in data_sources.items()}

    @classmethod
    def from_config_file(cls, path=None):
        return cls(load_config(path))

    @property
    def resource_types(self):
        return sorted(self._resources)

    @property
    def data_source_types(self):
        return sorted(self._data_sources)

    def resource(self, type_name):
        try:
            return self._resources[type_name]
        except KeyError:
            raise ProviderError(
                f'The provider does not support resource type "{type_name}"'
            )

    def data_source(self, type_name):
        try:
            return self._data_sources[type_name]
        except KeyError:
            raise ProviderError(
                f'The provider does not support data source "{type_name}"'
            )
