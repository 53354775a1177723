import pytest

from ebpfmeta.syscalls import SYSCALL_NAMES, SYSCALL_TABLE_SIZE, syscall_name


@pytest.mark.parametrize(
    ("number", "name"),
    [
        (0, "read"),
        (1, "write"),
        (59, "execve"),
        (257, "openat"),
        (321, "bpf"),
        (334, "rseq"),
        (424, "pidfd_send_signal"),
        (435, "clone3"),
        (437, "openat2"),
        (438, "pidfd_getfd"),
    ],
)
def test_known_names(number, name):
    assert syscall_name(number) == name


@pytest.mark.parametrize("number", [-1, 335, 423, 436, 439, 10_000])
def test_unknown_numbers(number):
    assert syscall_name(number) is None


def test_table_size_is_one_past_highest():
    assert SYSCALL_TABLE_SIZE == 439
    assert syscall_name(SYSCALL_TABLE_SIZE - 1) == "pidfd_getfd"


def test_names_are_unique_and_numbers_contiguous_below_335():
    names = list(SYSCALL_NAMES.values())
    assert len(names) == len(set(names))
    assert all(n in SYSCALL_NAMES for n in range(335))


def test_table_is_read_only():
    with pytest.raises(TypeError):
        SYSCALL_NAMES[999] = "made_up"  # type: ignore[index]
    with pytest.raises(TypeError):
        SYSCALL_NAMES[0] = "made_up"  # type: ignore[index]
    assert syscall_name(999) is None
    assert syscall_name(0) == "read"