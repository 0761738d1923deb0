from merkle_airdrop.program_errors import AccountConstraintError, DistributorError, ErrorCode


def test_messages_come_from_the_program():
    assert str(DistributorError(ErrorCode.INVALID_PROOF)) == "Invalid Merkle proof."
    assert str(DistributorError(ErrorCode.SAME_ADMIN)) == "New and old admin are identical"
    assert str(DistributorError(ErrorCode.ESCROW_IS_NOT_MAX_LOCK)) == "Escrow is not max lock"


def test_first_code_is_custom_error_offset():
    assert ErrorCode(6000) is ErrorCode.INSUFFICIENT_UNLOCKED_TOKENS
    assert ErrorCode(6002) is ErrorCode.INVALID_PROOF


def test_codes_are_consecutive_in_declaration_order():
    members = list(ErrorCode)
    first = members[0].value
    looked_up = [ErrorCode(first + offset) for offset in range(len(members))]
    assert looked_up == members
    assert looked_up[-1] is ErrorCode.ESCROW_IS_NOT_MAX_LOCK


def test_lookup_by_code():
    code = ErrorCode.ARITHMETIC_ERROR.value
    assert ErrorCode(code) is ErrorCode.ARITHMETIC_ERROR


def test_distributor_error_carries_code_and_message():
    err = DistributorError(ErrorCode.CLAIM_EXPIRED)
    assert err.code is ErrorCode.CLAIM_EXPIRED
    assert str(err) == "Claim window expired"


def test_account_constraint_error_names_constraint_and_account():
    err = AccountConstraintError("has_one", "admin")
    assert err.constraint == "has_one"
    assert err.account == "admin"
    assert "has_one" in str(err) and "admin" in str(err)