"""Hook pipeline compilation.

This package turns the storage layer's single-step resolvers into pipeline
resolvers:
- SharedComputeProvisioner creates the role and data source per hook Lambda
- StepFactory builds hook functions and wraps the original data operation
- PipelineCompiler orders them and emits the pipeline resolver

Pipeline Model:
    pipeline(op) = [before?] ++ [wrap(op)] ++ [after?]

    before ∈ pipeline(op)  ⇔  @hook(before: {op: true})
    after  ∈ pipeline(op)  ⇔  @hook(after: {op: true})
"""

from pipehook.operations import ModelOperation, OperationTarget, model_operations
from pipehook.pipeline.compiler import EntityPipelines, PipelineCompiler
from pipehook.pipeline.hoisting import HoistedContentRegistry
from pipehook.pipeline.provisioner import ComputeIdentity, SharedComputeProvisioner
from pipehook.pipeline.steps import StepFactory

__all__ = [
    "ComputeIdentity",
    "EntityPipelines",
    "HoistedContentRegistry",
    "ModelOperation",
    "OperationTarget",
    "PipelineCompiler",
    "SharedComputeProvisioner",
    "StepFactory",
    "model_operations",
]
