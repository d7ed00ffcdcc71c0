"""
Prometheus label construction for container metrics.
"""

import re
from typing import Dict

from docker_state_exporter.models import ContainerRecord

CONTAINER_LABEL_PREFIX = 'container_label_'

_INVALID_LABEL_CHARS = re.compile(r'[^a-zA-Z0-9_]')


def sanitize_label_name(key: str) -> str:
    """
    Turn a container label key into a valid Prometheus label name.

    >>> sanitize_label_name('com.Example/Tag 1')
    'container_label_com_example_tag_1'
    """
    label = (CONTAINER_LABEL_PREFIX + key).lower()
    return _INVALID_LABEL_CHARS.sub('_', label)


def container_labels(record: ContainerRecord) -> Dict[str, str]:
    """
    Build the base label set shared by every series of a container.

    User labels come first so the fixed id/image/name labels always win.

    Args:
        record: Container state record

    Returns:
        New label dictionary (callers may mutate it)
    """
    labels = {
        sanitize_label_name(key): value
        for key, value in record.labels.items()
    }
    labels['id'] = '/docker/' + record.id
    labels['image'] = record.image
    labels['name'] = record.name
    return labels
