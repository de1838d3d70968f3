import logging

import pytest
from aws_cdk import Stack, aws_ec2 as ec2, aws_kms as kms, aws_lambda as lambda_, aws_logs as logs

from infrastructure.composite.errors import ConfigurationError
from infrastructure.composite.models import CompositeSpec, FunctionIdentity, TriState
from infrastructure.composite.resolver import (
    ActionKind,
    EncryptionKind,
    LogAction,
    NetworkAction,
    ResolvedPlan,
    ResourceResolver,
    SecurityGroupAction,
    resolve_encryption,
)


def _spec(name: str = "f1", **kwargs) -> CompositeSpec:
    code = lambda_.Code.from_inline("def main(event, context):\n    return {}\n")
    return CompositeSpec(function_identity=FunctionIdentity(code=code, name=name), **kwargs)


def _network(stack: Stack) -> tuple[ec2.Vpc, ec2.SecurityGroup, ec2.SecurityGroup]:
    vpc = ec2.Vpc(stack, "ExistingVpc", max_azs=2, nat_gateways=1)
    sg1 = ec2.SecurityGroup(stack, "Sg1", vpc=vpc)
    sg2 = ec2.SecurityGroup(stack, "Sg2", vpc=vpc)
    return vpc, sg1, sg2


@pytest.mark.parametrize("flag", [False, TriState.DISABLED])
def test_network_opt_out_skips_network_and_groups(stack: Stack, flag) -> None:
    """
    Given: create_network=False 와 함께 네트워크/보안 그룹을 넘긴 스펙
    When: 리졸버 실행
    Then: 네트워크와 보안 그룹 모두 SKIP (명시적 opt-out 우선)
    """
    vpc, sg1, _ = _network(stack)
    plan = ResourceResolver().resolve(_spec(create_network=flag, network=vpc, security_groups=[sg1]))

    assert plan.network.kind is ActionKind.SKIP
    assert plan.security_groups.kind is ActionKind.SKIP
    assert plan.has_network is False


def test_network_opt_out_with_supplied_network_logs_warning(stack: Stack, caplog: pytest.LogCaptureFixture) -> None:
    """무시되는 네트워크 입력은 경고 로그를 남긴다."""
    vpc, _, _ = _network(stack)
    with caplog.at_level(logging.WARNING, logger="infrastructure.composite.resolver"):
        ResourceResolver().resolve(_spec(create_network=False, network=vpc))

    assert any("will be ignored" in rec.getMessage() for rec in caplog.records)


def test_strict_resolver_rejects_ignored_network_inputs(stack: Stack) -> None:
    """
    Given: strict 리졸버
    When: create_network=False 와 보안 그룹을 함께 지정
    Then: ConfigurationError
    """
    _, sg1, _ = _network(stack)
    with pytest.raises(ConfigurationError, match="security_groups will be ignored"):
        ResourceResolver(strict=True).resolve(_spec(create_network=False, security_groups=[sg1]))


def test_strict_resolver_allows_plain_opt_out() -> None:
    plan = ResourceResolver(strict=True).resolve(_spec(create_network=False))
    assert plan.network.kind is ActionKind.SKIP


def test_no_network_fields_creates_network_and_group() -> None:
    """
    Given: 네트워크 관련 필드가 없는 스펙
    When: 리졸버 실행
    Then: 네트워크 CREATE, 보안 그룹 CREATE
    """
    plan = ResourceResolver().resolve(_spec())

    assert plan.network.kind is ActionKind.CREATE
    assert plan.security_groups.kind is ActionKind.CREATE
    assert plan.network.vpc is None


def test_enabled_flag_behaves_like_unset() -> None:
    plan = ResourceResolver().resolve(_spec(create_network=True))
    assert plan.network.kind is ActionKind.CREATE
    assert plan.security_groups.kind is ActionKind.CREATE


def test_supplied_network_and_groups_are_reused_in_order(stack: Stack) -> None:
    """
    Given: 기존 VPC와 보안 그룹 두 개
    When: 리졸버 실행
    Then: 동일 핸들을 같은 순서로 재사용
    """
    vpc, sg1, sg2 = _network(stack)
    plan = ResourceResolver().resolve(_spec(network=vpc, security_groups=[sg2, sg1]))

    assert plan.network.kind is ActionKind.REUSE
    assert plan.network.vpc is vpc
    assert plan.security_groups.kind is ActionKind.REUSE
    assert plan.security_groups.groups[0] is sg2
    assert plan.security_groups.groups[1] is sg1


def test_duplicate_security_groups_are_collapsed(stack: Stack) -> None:
    vpc, sg1, sg2 = _network(stack)
    plan = ResourceResolver().resolve(_spec(network=vpc, security_groups=[sg1, sg2, sg1]))

    assert len(plan.security_groups.groups) == 2
    assert plan.security_groups.groups[0] is sg1
    assert plan.security_groups.groups[1] is sg2


def test_empty_security_group_list_creates_default_group(stack: Stack) -> None:
    vpc, _, _ = _network(stack)
    plan = ResourceResolver().resolve(_spec(network=vpc, security_groups=[]))

    assert plan.network.kind is ActionKind.REUSE
    assert plan.security_groups.kind is ActionKind.CREATE


def test_groups_without_network_are_reused_with_new_network(stack: Stack) -> None:
    """보안 그룹만 넘기면 네트워크는 새로 만들고 그룹은 재사용 (스코프 호환성은 검증하지 않음)."""
    _, sg1, _ = _network(stack)
    plan = ResourceResolver().resolve(_spec(security_groups=[sg1]))

    assert plan.network.kind is ActionKind.CREATE
    assert plan.security_groups.kind is ActionKind.REUSE
    assert plan.security_groups.groups == (sg1,)


def test_encryption_decision_table(stack: Stack) -> None:
    """
    Given: 관리형 키 플래그/키 지정 조합
    When: 암호화 결정
    Then: CREATE_KEY / REUSE_KEY / PROVIDER_MANAGED
    """
    key = kms.Key(stack, "Key")

    assert resolve_encryption(True, None).kind is EncryptionKind.CREATE_KEY
    reused = resolve_encryption(True, key)
    assert reused.kind is EncryptionKind.REUSE_KEY
    assert reused.key is key
    assert resolve_encryption(False, key).kind is EncryptionKind.REUSE_KEY
    assert resolve_encryption(False, None).kind is EncryptionKind.PROVIDER_MANAGED


def test_plan_always_creates_log_group_with_effective_retention() -> None:
    plan = ResourceResolver().resolve(_spec(name="orders", log_retention=logs.RetentionDays.TWO_WEEKS))

    assert plan.log.log_group_name == "/aws/lambda/orders"
    assert plan.log.retention == logs.RetentionDays.TWO_WEEKS
    assert plan.config.memory_size == 128


def test_plan_rejects_groups_without_network() -> None:
    """네트워크가 SKIP 인데 보안 그룹이 CREATE 인 계획은 만들 수 없다."""
    config = ResourceResolver().resolve(_spec()).config
    with pytest.raises(ConfigurationError):
        ResolvedPlan(
            network=NetworkAction.skip(),
            security_groups=SecurityGroupAction.create(),
            encryption=resolve_encryption(False, None),
            log=LogAction(log_group_name=None, retention=logs.RetentionDays.ONE_WEEK),
            config=config,
        )
