from typing import Any, Mapping


def _abort() -> None:
    print("Aborting deployment!")
    exit(-1)


def _continue() -> None:
    """Asks the user to continue."""
    answer = input("Continue Y/N? ")
    if answer.lower().strip() == "n":
        _abort()


def _confirm_deployment(contract_name: str) -> None:
    """Asks the user to confirm the deployment of a single contract."""
    answer = input(f"Deploy {contract_name} Y/N? ")
    if answer.lower().strip() == "n":
        _abort()


def _confirm_parameters(parameters: Mapping[str, Any], contract_name: str) -> None:
    """Asks the user to confirm the resolved initializer parameters of the proxy."""
    print(f"\nInitializer parameters for {contract_name}")
    for name, value in parameters.items():
        print(f"\t{name}={value}")
    _confirm_deployment(contract_name)
