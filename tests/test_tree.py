from hypothesis import given, strategies as st
from hypothesis.stateful import Bundle, RuleBasedStateMachine, rule, invariant
import pytest

from avltree import AVLTree, DUPLICATE_KEY, KEY_NOT_FOUND, SENTINEL
from tree_checks import verify_tree_integrity


@st.composite
def dict_and_key(draw, keys=st.integers(), values=st.text()):
    d = draw(st.dictionaries(keys, values, min_size=1))
    key = draw(st.sampled_from(list(d.keys())))
    return (d, key)


class AVLTreeStateMachine(RuleBasedStateMachine):
    def __init__(self):
        super().__init__()
        self.tree = AVLTree()
        self.model = {}

    keys = Bundle("keys")
    values = Bundle("values")

    @invariant()
    def check_integrity(self):
        verify_tree_integrity(self.tree, self.model)

    @rule(target=keys, k=st.integers())
    def add_key(self, k):
        return k

    @rule(target=values, v=st.text())
    def add_value(self, v):
        return v

    @rule(k=keys, v=values)
    def setitem(self, k, v):
        self.tree[k] = v
        self.model[k] = v

    @rule(k=keys)
    def getitem(self, k):
        if k not in self.model:
            with pytest.raises(KeyError):
                self.tree[k]
        else:
            assert self.tree[k] == self.model[k]

    @rule(k=keys)
    def delitem(self, k):
        if k not in self.model:
            with pytest.raises(KeyError):
                del self.tree[k]
        else:
            del self.tree[k]
            del self.model[k]

    @rule(k=keys)
    def contains(self, k):
        assert (k in self.tree) == (k in self.model)

    @rule(k=keys, v=values)
    def insert_method(self, k, v):
        ret = self.tree.insert(k, v)
        if k in self.model:
            assert ret == DUPLICATE_KEY
        else:
            assert ret >= 0
            self.model[k] = v

    @rule(k=keys)
    def delete_method(self, k):
        ret = self.tree.delete(k)
        if k in self.model:
            assert ret >= 0
            del self.model[k]
        else:
            assert ret == KEY_NOT_FOUND

    @rule(k=keys)
    def search(self, k):
        assert self.tree.search(k) == self.model.get(k)

    @rule(k=keys)
    def pop(self, k):
        if k not in self.model:
            with pytest.raises(KeyError):
                self.tree.pop(k)
        else:
            assert self.tree.pop(k) == self.model.pop(k)

    @rule()
    def min(self):
        if len(self.model) == 0:
            assert self.tree.min() is None
            with pytest.raises(IndexError):
                self.tree.min_item()
        else:
            k = min(self.model.keys())
            assert self.tree.min() == self.model[k]
            assert self.tree.min_item() == (k, self.model[k])

    @rule()
    def max(self):
        if len(self.model) == 0:
            assert self.tree.max() is None
            with pytest.raises(IndexError):
                self.tree.max_item()
        else:
            k = max(self.model.keys())
            assert self.tree.max() == self.model[k]
            assert self.tree.max_item() == (k, self.model[k])

    @rule()
    def size(self):
        assert self.tree.size() == len(self.model)
        assert self.tree.empty() == (len(self.model) == 0)

    @rule(k=keys)
    def get(self, k):
        assert self.tree.get(k) == self.model.get(k)


TestAVLTreeStateMachine = AVLTreeStateMachine.TestCase


@given(dict_and_key())  # pylint: disable=no-value-for-parameter
def test_insert_positive(givens):
    items, test_key = givens
    tree = AVLTree()

    for k, v in items.items():
        assert tree.insert(k, v) >= 0

    verify_tree_integrity(tree, items)
    assert tree[test_key] == items[test_key]
    assert tree.search(test_key) == items[test_key]


@given(dict_and_key())  # pylint: disable=no-value-for-parameter
def test_duplicate_insert_leaves_tree_unchanged(givens):
    items, test_key = givens
    tree = AVLTree()

    for k, v in items.items():
        tree.insert(k, v)
    before = tree.keys_to_array()

    assert tree.insert(test_key, "replacement") == DUPLICATE_KEY
    assert tree.keys_to_array() == before
    assert tree.search(test_key) == items[test_key]
    verify_tree_integrity(tree, items)


@given(dict_and_key())  # pylint: disable=no-value-for-parameter
def test_delete(givens):
    items, test_key = givens
    tree = AVLTree()

    for k, v in items.items():
        tree[k] = v

    assert tree.delete(test_key) >= 0
    del items[test_key]
    verify_tree_integrity(tree, items)


@given(dict_and_key())  # pylint: disable=no-value-for-parameter
def test_nonexistent_key(givens):
    items, test_key = givens
    tree = AVLTree()

    for k, v in items.items():
        tree[k] = v
    del tree[test_key]
    del items[test_key]

    assert tree.search(test_key) is None
    assert tree.node_search(test_key) is SENTINEL
    assert tree.delete(test_key) == KEY_NOT_FOUND
    verify_tree_integrity(tree, items)

    with pytest.raises(KeyError):
        tree[test_key]

    with pytest.raises(KeyError):
        del tree[test_key]

    assert test_key not in tree


@given(st.dictionaries(st.integers(), st.text()))
def test_iter(items):
    keys = sorted(items.keys())
    tree = AVLTree()

    for k, v in items.items():
        tree.insert(k, v)

    ret = list(tree.items())

    assert len(ret) == len(keys)
    for k1, kv in zip(keys, ret):
        assert k1 == kv[0]
        assert items[k1] == kv[1]

    assert tree.keys_to_array() == keys
    assert tree.info_to_array() == [items[k] for k in keys]


@given(st.dictionaries(st.integers(), st.text()))
def test_iter_reverse(items):
    keys = sorted(items.keys(), reverse=True)
    tree = AVLTree()

    for k, v in items.items():
        tree.insert(k, v)

    ret = list(tree.items(reverse=True))

    assert len(ret) == len(keys)
    for k1, kv in zip(keys, ret):
        assert k1 == kv[0]
        assert items[k1] == kv[1]

    assert list(reversed(tree)) == keys


@given(st.lists(st.integers(min_value=-1000, max_value=1000)))
def test_keys_strictly_ascending(keys):
    tree = AVLTree()
    for k in keys:
        tree.insert(k, str(k))

    arr = tree.keys_to_array()
    assert all(a < b for a, b in zip(arr, arr[1:]))
    assert arr == sorted(set(keys))


@given(
    st.lists(st.integers(min_value=0, max_value=200), min_size=1),
    st.lists(st.integers(min_value=0, max_value=200)),
)
def test_height_bound_after_mixed_updates(inserted, deleted):
    tree = AVLTree()
    model = {}
    for k in inserted:
        tree.insert(k, str(k))
        model[k] = str(k)
    for k in deleted:
        tree.delete(k)
        model.pop(k, None)

    verify_tree_integrity(tree, model)


def test_successor_and_predecessor():
    tree = AVLTree()
    for k in (20, 10, 30, 5, 15, 25, 35):
        tree.insert(k, str(k))

    node = tree.min_node()
    seen = []
    while node is not None:
        seen.append(node.key)
        node = tree.successor(node)
    assert seen == [5, 10, 15, 20, 25, 30, 35]

    node = tree.max_node()
    seen = []
    while node is not None:
        seen.append(node.key)
        node = tree.predecessor(node)
    assert seen == [35, 30, 25, 20, 15, 10, 5]


def test_empty_tree():
    tree = AVLTree()

    assert tree.empty()
    assert tree.size() == 0
    assert tree.height() == -1
    assert tree.min() is None
    assert tree.max() is None
    assert tree.search(1) is None
    assert tree.delete(1) == KEY_NOT_FOUND
    assert tree.keys_to_array() == []
    assert tree.info_to_array() == []
    assert tree.get_root() is SENTINEL
    assert tree.min_node() is None


def test_delete_root_cases():
    tree = AVLTree()
    tree.insert(1, "a")
    assert tree.delete(1) == 0
    assert tree.empty()

    tree.insert(1, "a")
    tree.insert(2, "b")
    assert tree.delete(1) == 0
    assert tree.get_root().key == 2
    assert tree.get_root().parent is None
    verify_tree_integrity(tree, {2: "b"})

    tree.insert(1, "a")
    tree.insert(3, "c")
    tree.delete(2)
    assert tree.get_root().key == 3
    verify_tree_integrity(tree, {1: "a", 3: "c"})


def test_delete_cascades_to_root():
    # removing 12 forces a rotation at 11 and then demotes 8 and the root
    tree = AVLTree()
    for k in (8, 5, 11, 3, 7, 10, 12, 2, 4, 6, 1, 9):
        tree.insert(k, str(k))
    height = tree.height()

    model = {k: str(k) for k in tree.keys()}
    tree.delete(12)
    del model[12]

    verify_tree_integrity(tree, model)
    assert tree.height() == height - 1
    assert tree.get_root().key == 5


def test_setitem_replaces_value_in_place():
    tree = AVLTree()
    tree[1] = "a"
    tree[2] = "b"
    root = tree.get_root()

    tree[1] = "z"
    assert tree.search(1) == "z"
    assert tree.get_root() is root
    assert len(tree) == 2


def test_clear():
    tree = AVLTree()
    for k in range(10):
        tree[k] = str(k)
    tree.clear()
    assert tree.empty()
    assert len(tree) == 0


@pytest.mark.parametrize("key", [1.5, "1", None, True])
def test_rejects_non_integer_keys(key):
    tree = AVLTree()
    with pytest.raises(TypeError):
        tree.insert(key, "x")
    assert key not in tree


def test_rejects_non_string_values():
    tree = AVLTree()
    with pytest.raises(TypeError):
        tree.insert(1, 1)
    assert tree.empty()
