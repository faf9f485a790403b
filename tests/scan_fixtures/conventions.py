from abc import ABC

from miraveja_scan import attribute
from scan_fixtures.basic import ITestService


class AutoRegister:
    pass


class BaseProcessor(ABC):
    pass


class DerivedProcessor(BaseProcessor, ITestService):
    pass


@attribute(AutoRegister)
class AttributeBasedService(ITestService):
    pass


class NameConventionService(ITestService):
    pass
