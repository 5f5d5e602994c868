"""Shared compute resources for hook Lambdas.

One IAM execution role and one AppSync Lambda data source exist per
(function name, region) identity, no matter how many entities or stages use
that function.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any

from pipehook.config import PipehookConfig
from pipehook.resources import fn, ids
from pipehook.resources.graph import Resource, ResourceGraph

logger = logging.getLogger(__name__)

_ENV_PLACEHOLDER = re.compile(r"(\$\{env\})")
_ENV_SUFFIX = re.compile(r"(-\$\{env\})")


@dataclass(frozen=True)
class ComputeIdentity:
    """A hook Lambda, identified by name and optional region."""

    name: str
    region: str | None = None

    def __post_init__(self) -> None:
        # A blank region means the stack's region
        if self.region is not None and not self.region.strip():
            object.__setattr__(self, "region", None)

    @property
    def role_id(self) -> str:
        return ids.role_id(self.name, self.region)

    @property
    def data_source_id(self) -> str:
        return ids.data_source_id(self.name, self.region)


def references_env(name: str) -> bool:
    return _ENV_PLACEHOLDER.search(name) is not None


def remove_env_reference(name: str) -> str:
    return _ENV_SUFFIX.sub("", name)


def lambda_arn_key(name: str, region: str | None = None) -> str:
    if region:
        return f"arn:aws:lambda:{region}:${{AWS::AccountId}}:function:{name}"
    return f"arn:aws:lambda:${{AWS::Region}}:${{AWS::AccountId}}:function:{name}"


def lambda_arn(name: str, region: str | None, config: PipehookConfig) -> dict[str, Any]:
    """Function ARN, with the environment substituted only when the name asks for it.

    Without an environment parameter the ``-${env}`` suffix is dropped.
    """
    substitutions: dict[str, Any] = {}
    if references_env(name):
        substitutions["env"] = fn.ref(config.env_parameter)
    return fn.if_(
        config.env_condition,
        fn.sub(lambda_arn_key(name, region), substitutions),
        fn.sub(lambda_arn_key(remove_env_reference(name), region)),
    )


class SharedComputeProvisioner:
    """Idempotently creates the role and data source for a ComputeIdentity."""

    def __init__(self, graph: ResourceGraph, config: PipehookConfig) -> None:
        self.graph = graph
        self.config = config

    def _api_id(self) -> dict[str, Any]:
        return fn.get_att(self.config.api_logical_id, "ApiId")

    def _role(self, identity: ComputeIdentity) -> Resource:
        config = self.config
        return Resource(
            type="AWS::IAM::Role",
            properties={
                "RoleName": fn.if_(
                    config.env_condition,
                    fn.join(
                        "-",
                        [
                            ids.role_name(identity.name, identity.region, with_env=True),
                            self._api_id(),
                            fn.ref(config.env_parameter),
                        ],
                    ),
                    fn.join("-", [ids.role_name(identity.name, identity.region), self._api_id()]),
                ),
                "AssumeRolePolicyDocument": {
                    "Version": "2012-10-17",
                    "Statement": [
                        {
                            "Effect": "Allow",
                            "Principal": {"Service": config.service_principal},
                            "Action": "sts:AssumeRole",
                        }
                    ],
                },
                "Policies": [
                    {
                        "PolicyName": "InvokeLambdaFunction",
                        "PolicyDocument": {
                            "Version": "2012-10-17",
                            "Statement": [
                                {
                                    "Effect": "Allow",
                                    "Action": ["lambda:InvokeFunction"],
                                    "Resource": lambda_arn(identity.name, identity.region, config),
                                }
                            ],
                        },
                    }
                ],
            },
        )

    def _data_source(self, identity: ComputeIdentity) -> Resource:
        return Resource(
            type="AWS::AppSync::DataSource",
            properties={
                "ApiId": self._api_id(),
                "Name": identity.data_source_id,
                "Type": "AWS_LAMBDA",
                "ServiceRoleArn": fn.get_att(identity.role_id, "Arn"),
                "LambdaConfig": {
                    "LambdaFunctionArn": lambda_arn(identity.name, identity.region, self.config),
                },
            },
        )

    def ensure(self, identity: ComputeIdentity) -> str:
        """Create the role and data source for ``identity`` if missing.

        Args:
            identity: Hook Lambda identity

        Returns:
            Data source id
        """
        group = self.config.stack_name

        role_id = identity.role_id
        if role_id not in self.graph:
            self.graph.set(role_id, self._role(identity))
            self.graph.assign_group(group, role_id)
            logger.debug("Created execution role '%s' for %s", role_id, identity)

        data_source_id = identity.data_source_id
        if data_source_id not in self.graph:
            self.graph.set(data_source_id, self._data_source(identity))
            self.graph.assign_group(group, data_source_id)
            if self.graph.group_of(role_id) == group:
                self.graph.add_dependency(data_source_id, role_id)
            logger.debug("Created Lambda data source '%s' for %s", data_source_id, identity)

        return data_source_id
