import heapq
import itertools


class EmptyForestError(ValueError): # raised when there is nothing to build a tree from (empty message)
    pass


class HuffmanNode: # common base for leaf and internal nodes, never built directly
    def __init__(self, weight):
        if type(self) is HuffmanNode:
            raise TypeError("HuffmanNode is abstract, build a HuffmanLeaf or HuffmanInternal")
        self.weight = weight # frequency (leaf) or sum of children's weights (internal)

    @property
    def is_leaf(self):
        return False


class HuffmanLeaf(HuffmanNode):
    def __init__(self, symbol, weight):
        super().__init__(weight)
        self.symbol = symbol # any hashable symbol, falsy values (0, '') included

    @property
    def is_leaf(self):
        return True

    def __repr__(self):
        return f"HuffmanLeaf({self.symbol!r}, {self.weight})"


class HuffmanInternal(HuffmanNode):
    def __init__(self, left, right):
        super().__init__(left.weight + right.weight)
        self.left = left # owned exclusively by this node
        self.right = right

    def __repr__(self):
        return f"HuffmanInternal({self.weight}, {self.left!r}, {self.right!r})"


class PriorityForest:
    """
    Min-heap of Huffman nodes keyed on weight
    Equal weights come out in insertion order so results are reproducible
    """
    def __init__(self):
        self._heap = []
        self._counter = itertools.count()

    def push(self, node: HuffmanNode) -> None:
        heapq.heappush(self._heap, (node.weight, next(self._counter), node))

    def pop(self) -> HuffmanNode:
        if not self._heap:
            raise EmptyForestError("cannot extract from an empty forest")
        return heapq.heappop(self._heap)[2]

    def peek(self) -> HuffmanNode:
        if not self._heap:
            raise EmptyForestError("cannot peek into an empty forest")
        return self._heap[0][2]

    def size(self) -> int:
        return len(self._heap)

    def __len__(self):
        return len(self._heap)

    def __bool__(self):
        return bool(self._heap)


def count_frequency(message): # message: any iterable of symbols (str -> chars, bytes -> ints), None == empty
    frequency_table = {}
    if message is None:
        return frequency_table
    for symbol in message:
        frequency_table[symbol] = frequency_table.get(symbol, 0) + 1
    return frequency_table # symbol -> count, first-occurrence order, no zero entries


def build_forest(frequency_table) -> PriorityForest: # frequency_table: dict of symbol -> frequency
    forest = PriorityForest()
    # ascending symbol order, independent of where symbols appear in the message
    for symbol in sorted(frequency_table):
        frequency = frequency_table[symbol]
        if frequency <= 0:
            continue
        forest.push(HuffmanLeaf(symbol, frequency))
    return forest


def build_tree(forest: PriorityForest) -> HuffmanNode: # consumes the forest
    if forest.size() == 0:
        raise EmptyForestError("cannot build a Huffman tree from an empty forest (empty message?)")

    while forest.size() > 1:
        left = forest.pop()
        right = forest.pop()
        forest.push(HuffmanInternal(left, right)) # merged node goes back into the forest

    # a single leaf is returned as-is, its codeword will be ''
    return forest.pop()


def create_encoding_table(root: HuffmanNode): # root: root of the Huffman tree
    codes = {}
    path = [] # shared bit buffer, pushed/popped around each branch

    def walk(node):
        if node is None:
            return

        # Leaf node -> assign code
        if node.is_leaf:
            codes[node.symbol] = ''.join(path)
            return

        path.append('0')
        walk(node.left)
        path[-1] = '1'
        walk(node.right)
        path.pop()

    walk(root)
    return codes # mapping of symbols to their codewords, pre-order (left first)


def huffman_code(message):
    """
    Full pipeline: message -> frequencies -> forest -> tree -> code table
    Raises EmptyForestError for an empty message
    """
    frequency_table = count_frequency(message)
    root = build_tree(build_forest(frequency_table))
    return create_encoding_table(root)


# Code table utilities

def code_lengths(codes):
    return {symbol: len(code) for symbol, code in codes.items()}


def weighted_code_length(codes, frequency_table) -> int: # total encoded length in bits
    return sum(frequency_table[symbol] * len(code) for symbol, code in codes.items())


def is_prefix_free(codes) -> bool:
    # after sorting, a prefix always sorts directly before some word that extends it
    words = sorted(codes.values())
    for shorter, longer in zip(words, words[1:]):
        if longer.startswith(shorter):
            return False
    return True


def tree_height(root) -> int: # number of edges on the longest root-to-leaf path
    if root is None or root.is_leaf:
        return 0
    return 1 + max(tree_height(root.left), tree_height(root.right))
