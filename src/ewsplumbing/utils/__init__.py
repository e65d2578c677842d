# ewsplumbing/utils/__init__.py

from .config_loader import ClientSection, EwsPlumbingConfig, load_config
from .logger import setup_logger
from .scope_guard import OnScopeExit
from .xml_parser import SoapFault, extract_soap_body, find_soap_fault, parse_soap_response

__all__: list[str] = [
    # config_loader.py
    'ClientSection',
    'EwsPlumbingConfig',
    'load_config',
    # scope_guard.py
    'OnScopeExit',
    # xml_parser.py
    'SoapFault',
    'extract_soap_body',
    'find_soap_fault',
    'parse_soap_response',
    # logger.py
    'setup_logger',
]
