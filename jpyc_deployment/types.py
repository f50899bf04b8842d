import click

from jpyc_deployment.normalize import NormalizationError, normalize_address, normalize_decimals


class Decimals(click.ParamType):
    name = "decimals"

    def convert(self, value, param, ctx):
        try:
            return normalize_decimals(value)
        except NormalizationError as e:
            self.fail(str(e), param, ctx)


class ChecksumAddress(click.ParamType):
    name = "checksum_address"

    def __init__(self, label: str = "account"):
        self.label = label

    def convert(self, value, param, ctx):
        try:
            value = normalize_address(value, label=self.label)
        except NormalizationError as e:
            self.fail(str(e), param, ctx)
        else:
            return value
