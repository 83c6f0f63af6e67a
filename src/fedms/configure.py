import json
import logging
from typing import Dict
from typing import List
from typing import Optional

from idpyoidc.configure import Base
from idpyoidc.configure import add_base_path

from fedms.defaults import DEFAULT_CONFIG

logger = logging.getLogger(__name__)

DEFAULT_FEDMS_FILE_ATTRIBUTE_NAMES = ['trust_anchors']


def load_trust_anchors(filename: str) -> dict:
    """
    Read trust anchors from a JSON file. The file holds a JSON object with
    federation operator IDs as keys and JWKSs as values.

    :param filename: Path to the file
    :return: Dictionary with federation operator IDs as keys and JWKSs as values
    """
    with open(filename) as fp:
        return json.load(fp)


class FedMSConfiguration(Base):
    """ Configuration of a relying party that verifies federated provider metadata """

    def __init__(self,
                 conf: Dict,
                 entity_conf: Optional[List[dict]] = None,
                 base_path: Optional[str] = '',
                 file_attributes: Optional[List[str]] = None,
                 domain: Optional[str] = "",
                 port: Optional[int] = 0,
                 dir_attributes: Optional[List[str]] = None,
                 ):
        """

        :param conf: The configuration
        :param entity_conf: Not used, accepted since
            :py:func:`idpyoidc.configure.create_from_config_file` always passes it
        :param base_path: Relative file names in the configuration are relative to this
        :param file_attributes: Configuration attributes whose values are file names
        """
        file_attributes = file_attributes or DEFAULT_FEDMS_FILE_ATTRIBUTE_NAMES

        Base.__init__(self, conf=conf, base_path=base_path, file_attributes=file_attributes,
                      dir_attributes=dir_attributes, domain=domain, port=port)
        # Base only applies base_path to its own default file attributes
        if base_path and not self._file_attributes:
            add_base_path(conf, base_path, file_attributes, "file")

        _trust_anchors = conf.get("trust_anchors", {})
        if isinstance(_trust_anchors, str):
            logger.debug(f"Loading trust anchors from {_trust_anchors}")
            self.trust_anchors = load_trust_anchors(_trust_anchors)
        else:
            self.trust_anchors = _trust_anchors

        self.priority = conf.get("priority", DEFAULT_CONFIG["priority"])
        self.allowed_delta = conf.get("allowed_delta", DEFAULT_CONFIG["allowed_delta"])
        self.max_depth = conf.get("max_depth", DEFAULT_CONFIG["max_depth"])
        self.httpc_params = conf.get("httpc_params", DEFAULT_CONFIG["httpc_params"])
