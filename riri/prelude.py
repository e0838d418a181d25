"""
RiriLang Runtime Prelude

C++ support code prepended to every emitted translation unit. The blocks are
fixed text; EmitOptions only decides which optional blocks are included.
Every helper name the code generator emits must be defined here.
"""

from typing import List

from .config import EmitOptions, DEFAULT_DATABASE


CORE_INCLUDES = """\
#include <iostream>
#include <vector>
#include <string>
#include <functional>
#include <cmath>
#include <algorithm>
#include <cctype>
#include <cstdlib>
#include <cstdio>
#include <cstring>
#include <ctime>
#include <stdexcept>
#include <queue>
#include <stack>
#include <map>
#include <unordered_map>
#include <set>
#include <regex>
#include <memory>
#include <sstream>
#include <type_traits>
#include <thread>
#include <chrono>
#include <future>
"""

WEB_INCLUDES = """\
#include "httplib.h"
#include <openssl/hmac.h>
#include <openssl/evp.h>
#include <openssl/sha.h>
#include <openssl/buffer.h>
#include <openssl/bio.h>
"""

GUI_INCLUDES = """\
#include <QApplication>
#include <QWidget>
#include <QPushButton>
#include <QLabel>
#include <QLineEdit>
#include <QVBoxLayout>
#include <QHBoxLayout>
#include <QListWidget>
#include <QMessageBox>
"""

DATABASE_INCLUDES = """\
#include <sqlite3.h>
"""

DATABASE_HELPERS = """
// --- SQLite database helpers ---
class RiriDB {
    sqlite3* db = nullptr;

public:
    explicit RiriDB(const std::string& path) {
        if (sqlite3_open(path.c_str(), &db) != SQLITE_OK) {
            std::cerr << "Cannot open database: " << sqlite3_errmsg(db) << std::endl;
            sqlite3_close(db);
            db = nullptr;
        }
    }

    ~RiriDB() {
        if (db) sqlite3_close(db);
    }

    bool execute(const std::string& sql) {
        if (!db) return false;
        char* err = nullptr;
        if (sqlite3_exec(db, sql.c_str(), nullptr, nullptr, &err) != SQLITE_OK) {
            std::cerr << "SQL error: " << err << std::endl;
            sqlite3_free(err);
            return false;
        }
        return true;
    }

    std::vector<std::vector<std::string>> query(const std::string& sql) {
        std::vector<std::vector<std::string>> rows;
        if (!db) return rows;
        sqlite3_stmt* stmt = nullptr;
        if (sqlite3_prepare_v2(db, sql.c_str(), -1, &stmt, nullptr) != SQLITE_OK) {
            std::cerr << "SQL prepare error: " << sqlite3_errmsg(db) << std::endl;
            return rows;
        }
        int cols = sqlite3_column_count(stmt);
        while (sqlite3_step(stmt) == SQLITE_ROW) {
            std::vector<std::string> row;
            for (int i = 0; i < cols; i++) {
                const char* val = reinterpret_cast<const char*>(sqlite3_column_text(stmt, i));
                row.push_back(val ? val : "");
            }
            rows.push_back(row);
        }
        sqlite3_finalize(stmt);
        return rows;
    }

    int lastInsertId() {
        return db ? static_cast<int>(sqlite3_last_insert_rowid(db)) : 0;
    }
};

std::unique_ptr<RiriDB> _riri_db;

void _riri_db_init(std::string path = "%(database)s") {
    _riri_db = std::make_unique<RiriDB>(path);
}

bool _riri_db_exec(std::string sql) {
    if (!_riri_db) _riri_db_init();
    return _riri_db->execute(sql);
}

std::vector<std::vector<std::string>> _riri_db_query(std::string sql) {
    if (!_riri_db) _riri_db_init();
    return _riri_db->query(sql);
}

int _riri_db_last_id() {
    return _riri_db ? _riri_db->lastInsertId() : 0;
}

std::string _riri_escape_sql(std::string s) {
    std::string out;
    for (char c : s) {
        if (c == '\\'') out += "''";
        else out += c;
    }
    return out;
}
"""

WEB_HELPERS = r"""
// --- Base64Url, HMAC-SHA256 and JWT ---
std::string base64url_encode(const std::string& in) {
    if (in.empty()) return "";
    BIO* b64 = BIO_new(BIO_f_base64());
    BIO* bio = BIO_new(BIO_s_mem());
    BIO_set_flags(b64, BIO_FLAGS_BASE64_NO_NL);
    bio = BIO_push(b64, bio);
    BIO_write(bio, in.data(), static_cast<int>(in.size()));
    BIO_flush(bio);
    BUF_MEM* buffer = nullptr;
    BIO_get_mem_ptr(bio, &buffer);
    std::string out(buffer->data, buffer->length);
    BIO_free_all(bio);
    std::replace(out.begin(), out.end(), '+', '-');
    std::replace(out.begin(), out.end(), '/', '_');
    out.erase(std::remove(out.begin(), out.end(), '='), out.end());
    return out;
}

std::string base64url_decode(const std::string& in) {
    if (in.empty()) return "";
    std::string padded = in;
    std::replace(padded.begin(), padded.end(), '-', '+');
    std::replace(padded.begin(), padded.end(), '_', '/');
    while (padded.size() % 4 != 0) padded += '=';
    std::vector<char> buffer(padded.size());
    BIO* b64 = BIO_new(BIO_f_base64());
    BIO* bio = BIO_new_mem_buf(padded.data(), static_cast<int>(padded.size()));
    BIO_set_flags(b64, BIO_FLAGS_BASE64_NO_NL);
    bio = BIO_push(b64, bio);
    int len = BIO_read(bio, buffer.data(), static_cast<int>(buffer.size()));
    BIO_free_all(bio);
    return len > 0 ? std::string(buffer.data(), len) : "";
}

std::string hmac_sha256(const std::string& key, const std::string& data) {
    unsigned char hash[EVP_MAX_MD_SIZE];
    unsigned int len = 0;
    HMAC(EVP_sha256(), key.data(), static_cast<int>(key.size()),
         reinterpret_cast<const unsigned char*>(data.data()), data.size(), hash, &len);
    return std::string(reinterpret_cast<char*>(hash), len);
}

struct JWT {
    static std::string sign(std::string payload, std::string secret) {
        std::string header = base64url_encode("{\"alg\":\"HS256\",\"typ\":\"JWT\"}");
        std::string body = base64url_encode(payload);
        std::string signature = base64url_encode(hmac_sha256(secret, header + "." + body));
        return header + "." + body + "." + signature;
    }

    static std::string verify(std::string token, std::string secret) {
        std::vector<std::string> parts;
        std::stringstream ss(token);
        std::string segment;
        while (std::getline(ss, segment, '.')) {
            parts.push_back(segment);
            if (parts.size() > 3) break;
        }
        if (parts.size() != 3) return "error: invalid token format";
        std::string expected = base64url_encode(hmac_sha256(secret, parts[0] + "." + parts[1]));
        if (parts[2] != expected) return "error: signature mismatch";
        return base64url_decode(parts[1]);
    }
};

// --- Minimal JSON field extraction ---
size_t _riri_json_value_start(const std::string& json, const std::string& key) {
    std::string pattern = "\"" + key + "\"";
    size_t pos = json.find(pattern);
    if (pos == std::string::npos) return pos;
    pos = json.find(':', pos + pattern.size());
    if (pos == std::string::npos) return pos;
    pos++;
    while (pos < json.size() && std::isspace(static_cast<unsigned char>(json[pos]))) pos++;
    return pos < json.size() ? pos : std::string::npos;
}

size_t _riri_json_string_end(const std::string& json, size_t pos) {
    while (pos < json.size()) {
        if (json[pos] == '"' && json[pos - 1] != '\\') return pos;
        pos++;
    }
    return std::string::npos;
}

std::string _riri_get_json_string(std::string json, std::string key) {
    size_t pos = _riri_json_value_start(json, key);
    if (pos == std::string::npos) return "";
    if (json[pos] == '"') {
        size_t end = _riri_json_string_end(json, pos + 1);
        if (end == std::string::npos) return "";
        return json.substr(pos + 1, end - pos - 1);
    }
    size_t end = json.find_first_of(",}", pos);
    if (end == std::string::npos) return "";
    return json.substr(pos, end - pos);
}

std::vector<std::string> _riri_get_json_array(std::string json, std::string key) {
    std::vector<std::string> items;
    size_t pos = _riri_json_value_start(json, key);
    if (pos == std::string::npos || json[pos] != '[') return items;
    pos++;
    while (pos < json.size()) {
        while (pos < json.size() && std::isspace(static_cast<unsigned char>(json[pos]))) pos++;
        if (pos >= json.size() || json[pos] == ']') break;
        if (json[pos] == '"') {
            size_t end = _riri_json_string_end(json, pos + 1);
            if (end == std::string::npos) break;
            items.push_back(json.substr(pos + 1, end - pos - 1));
            pos = end + 1;
        }
        pos = json.find_first_of(",]", pos);
        if (pos == std::string::npos || json[pos] == ']') break;
        pos++;
    }
    return items;
}

struct JSON {
    static std::string get(std::string json, std::string key) {
        return _riri_get_json_string(json, key);
    }
    static std::vector<std::string> getArray(std::string json, std::string key) {
        return _riri_get_json_array(json, key);
    }
};

// --- HTTP client and request helpers ---
void _riri_split_url(const std::string& url, std::string& base, std::string& path) {
    size_t scheme = url.find("://");
    size_t start = scheme == std::string::npos ? 0 : scheme + 3;
    size_t slash = url.find('/', start);
    if (slash == std::string::npos) {
        base = url;
        path = "/";
    } else {
        base = url.substr(0, slash);
        path = url.substr(slash);
    }
}

httplib::Headers _riri_auth_headers(const std::string& token) {
    httplib::Headers headers;
    if (!token.empty()) headers.emplace("Authorization", token);
    return headers;
}

std::string _riri_fetch_get(std::string url, std::string token = "") {
    std::string base, path;
    _riri_split_url(url, base, path);
    httplib::Client cli(base);
    auto res = cli.Get(path, _riri_auth_headers(token));
    if (res && res->status == 200) return res->body;
    return "";
}

std::string _riri_fetch_post(std::string url, std::string body, std::string token = "") {
    std::string base, path;
    _riri_split_url(url, base, path);
    httplib::Client cli(base);
    auto res = cli.Post(path, _riri_auth_headers(token), body, "application/json");
    if (res) return res->body;
    return "error";
}

std::string _riri_get_query(const std::multimap<std::string, std::string>& m, std::string key) {
    auto it = m.find(key);
    return it != m.end() ? it->second : "";
}

std::string _riri_get_param(const std::unordered_map<std::string, std::string>& m, std::string key) {
    auto it = m.find(key);
    return it != m.end() ? it->second : "";
}
"""

GUI_HELPERS = """
// --- Qt helpers ---
QString qt_str(std::string s) { return QString::fromStdString(s); }
std::string qt_to_std(QString s) { return s.toStdString(); }

void qt_connect(std::shared_ptr<QPushButton> btn, std::string signal, std::function<void()> callback) {
    if (btn && signal == "clicked") {
        QObject::connect(btn.get(), &QPushButton::clicked, callback);
    }
}

std::shared_ptr<QListWidget> _riri_create_list() {
    return std::make_shared<QListWidget>();
}

void _riri_list_add(std::shared_ptr<QListWidget> list, std::string item) {
    list->addItem(qt_str(item));
}

void _riri_list_clear(std::shared_ptr<QListWidget> list) {
    list->clear();
}

void _riri_msg_box(std::string msg) {
    QMessageBox box;
    box.setText(qt_str(msg));
    box.exec();
}

// Widgets are owned by their Qt parents, never deleted here
struct QtElement {
    QWidget* widget = nullptr;
    QLayout* layout = nullptr;
    std::string tagName;

    explicit QtElement(std::string tag) : tagName(tag) {}

    void setAttribute(std::string key, std::string value) {
        if (!widget) return;
        if (key == "text") {
            if (auto btn = qobject_cast<QPushButton*>(widget)) btn->setText(qt_str(value));
            else if (auto lbl = qobject_cast<QLabel*>(widget)) lbl->setText(qt_str(value));
            else if (auto inp = qobject_cast<QLineEdit*>(widget)) inp->setText(qt_str(value));
        } else if (key == "title") {
            widget->setWindowTitle(qt_str(value));
        } else if (key == "style") {
            widget->setStyleSheet(qt_str(value));
        } else if (key == "placeholder") {
            if (auto inp = qobject_cast<QLineEdit*>(widget)) inp->setPlaceholderText(qt_str(value));
        }
    }

    std::string getValue() {
        if (auto inp = qobject_cast<QLineEdit*>(widget)) return inp->text().toStdString();
        return "";
    }

    void addItem(std::string text) {
        if (auto lst = qobject_cast<QListWidget*>(widget)) lst->addItem(qt_str(text));
    }

    void clearItems() {
        if (auto lst = qobject_cast<QListWidget*>(widget)) lst->clear();
    }

    void addEventListener(std::string event, std::function<void()> callback) {
        if (event != "click") return;
        if (auto btn = qobject_cast<QPushButton*>(widget)) {
            QObject::connect(btn, &QPushButton::clicked, callback);
        }
    }

    void appendChild(QtElement* child) {
        if (!widget || !child || !child->widget) return;
        if (layout) {
            layout->addWidget(child->widget);
        } else {
            child->widget->setParent(widget);
            child->widget->show();
        }
    }

    void show() {
        if (widget) widget->show();
    }
};

struct Document {
    QtElement* createElement(std::string tag) {
        QtElement* el = new QtElement(tag);
        if (tag == "div" || tag == "window") {
            el->widget = new QWidget();
            el->layout = new QVBoxLayout(el->widget);
            if (tag == "window") el->widget->resize(400, 300);
        } else if (tag == "span") {
            el->widget = new QWidget();
            el->layout = new QHBoxLayout(el->widget);
        } else if (tag == "button") {
            el->widget = new QPushButton();
        } else if (tag == "label") {
            el->widget = new QLabel();
        } else if (tag == "input") {
            el->widget = new QLineEdit();
        } else if (tag == "list") {
            el->widget = new QListWidget();
        }
        return el;
    }
};
"""

CORE_HELPERS = r"""
// --- Printing, input and async ---
template <typename T>
void print_val(const T& value) { std::cout << value; }

std::string _riri_input() {
    std::string line;
    std::getline(std::cin, line);
    return line;
}

template <typename Func>
auto async_task(Func&& func) {
    return std::async(std::launch::async, std::forward<Func>(func));
}

void delay(int milliseconds) {
    std::this_thread::sleep_for(std::chrono::milliseconds(milliseconds));
}

template <typename T>
T await_result(std::future<T>&& future) {
    return future.get();
}

template <typename T>
T await_result(std::future<T>& future) {
    return future.get();
}

std::string _riri_fetch(std::string url) {
    std::string cmd = "curl -s " + url;
    std::string result;
    char buffer[128];
    FILE* pipe = popen(cmd.c_str(), "r");
    if (!pipe) return "ERROR";
    while (fgets(buffer, sizeof(buffer), pipe) != nullptr) result += buffer;
    pclose(pipe);
    return result;
}

// --- push/pop over arrays and user objects ---
template <typename T, typename U>
void _riri_push(std::vector<T>& vec, U val) {
    vec.push_back(val);
}

template <typename T, typename U>
void _riri_push(T* obj, U val) {
    obj->push(val);
}

template <typename T, typename U>
void _riri_push(std::shared_ptr<T> obj, U val) {
    obj->push(val);
}

template <typename T>
T _riri_pop(std::vector<T>& vec) {
    if (vec.empty()) return T();
    T val = vec.back();
    vec.pop_back();
    return val;
}

template <typename T>
auto _riri_pop(T* obj) {
    return obj->pop();
}

template <typename T>
auto _riri_pop(std::shared_ptr<T> obj) {
    return obj->pop();
}

// --- Array helpers ---
template <typename T, typename Func>
auto _riri_map(const std::vector<T>& vec, Func callback) {
    std::vector<std::decay_t<std::invoke_result_t<Func&, const T&>>> result;
    for (const auto& item : vec) result.push_back(callback(item));
    return result;
}

template <typename T, typename Func>
std::vector<T> _riri_filter(const std::vector<T>& vec, Func callback) {
    std::vector<T> result;
    for (const auto& item : vec) {
        if (callback(item)) result.push_back(item);
    }
    return result;
}

template <typename T, typename Func>
void _riri_forEach(const std::vector<T>& vec, Func callback) {
    for (size_t i = 0; i < vec.size(); i++) {
        if constexpr (std::is_invocable_v<Func&, const T&, int>) callback(vec[i], static_cast<int>(i));
        else callback(vec[i]);
    }
}

template <typename T, typename Func, typename U>
U _riri_reduce(const std::vector<T>& vec, Func callback, U initial) {
    U result = initial;
    for (size_t i = 0; i < vec.size(); i++) {
        if constexpr (std::is_invocable_v<Func&, U, const T&, int>) result = callback(result, vec[i], static_cast<int>(i));
        else result = callback(result, vec[i]);
    }
    return result;
}

template <typename T>
std::vector<T> _riri_slice(const std::vector<T>& vec, int start, int end = -1) {
    int size = static_cast<int>(vec.size());
    if (end == -1) end = size;
    if (start < 0) start += size;
    if (end < 0) end += size;
    start = std::max(start, 0);
    end = std::min(end, size);
    if (start >= end) return {};
    return std::vector<T>(vec.begin() + start, vec.begin() + end);
}

template <typename T, typename U>
int _riri_indexOf(const std::vector<T>& vec, const U& value) {
    for (size_t i = 0; i < vec.size(); i++) {
        if (vec[i] == value) return static_cast<int>(i);
    }
    return -1;
}

template <typename T, typename U>
bool _riri_includes(const std::vector<T>& vec, const U& value) {
    return _riri_indexOf(vec, value) != -1;
}

template <typename T>
std::vector<T> _riri_concat(const std::vector<T>& a, const std::vector<T>& b) {
    std::vector<T> result = a;
    result.insert(result.end(), b.begin(), b.end());
    return result;
}

template <typename T>
std::vector<T> _riri_reverse(std::vector<T> vec) {
    std::reverse(vec.begin(), vec.end());
    return vec;
}

template <typename T>
std::string _riri_join(const std::vector<T>& vec, std::string separator = ",") {
    std::ostringstream out;
    for (size_t i = 0; i < vec.size(); i++) {
        if (i > 0) out << separator;
        out << vec[i];
    }
    return out.str();
}

template <typename T>
void _riri_tprint(const std::vector<T>& vec) {
    std::cout << "+----------------+" << std::endl;
    std::cout << "| Index | Value  |" << std::endl;
    std::cout << "+----------------+" << std::endl;
    for (size_t i = 0; i < vec.size(); ++i) {
        std::cout << "| " << i << "\t| " << vec[i] << "\t|" << std::endl;
    }
    std::cout << "+----------------+" << std::endl;
}

// --- String helpers ---
std::vector<std::string> _riri_split(std::string str, std::string delimiter) {
    std::vector<std::string> parts;
    if (delimiter.empty()) {
        for (char c : str) parts.push_back(std::string(1, c));
        return parts;
    }
    size_t pos = 0;
    while ((pos = str.find(delimiter)) != std::string::npos) {
        parts.push_back(str.substr(0, pos));
        str.erase(0, pos + delimiter.size());
    }
    parts.push_back(str);
    return parts;
}

std::string _riri_toLowerCase(std::string str) {
    std::transform(str.begin(), str.end(), str.begin(), [](unsigned char c) { return std::tolower(c); });
    return str;
}

std::string _riri_toUpperCase(std::string str) {
    std::transform(str.begin(), str.end(), str.begin(), [](unsigned char c) { return std::toupper(c); });
    return str;
}

std::string _riri_trim(std::string str) {
    const char* blank = " \t\n\r";
    size_t first = str.find_first_not_of(blank);
    if (first == std::string::npos) return "";
    return str.substr(first, str.find_last_not_of(blank) - first + 1);
}

bool _riri_startsWith(std::string str, std::string prefix) {
    return str.rfind(prefix, 0) == 0;
}

int _riri_parseInt(std::string str) {
    return std::stoi(str);
}

double _riri_parseFloat(std::string str) {
    return std::stod(str);
}
"""

DATA_STRUCTURES = """
// --- Built-in data structures ---
struct Node {
    int data;
    int height = 1;
    std::shared_ptr<Node> left;
    std::shared_ptr<Node> right;

    explicit Node(int val) : data(val) {}
};

void _riri_print_in_order(std::shared_ptr<Node> node) {
    if (!node) return;
    _riri_print_in_order(node->left);
    std::cout << node->data << " ";
    _riri_print_in_order(node->right);
}

struct BinaryTree {
    std::shared_ptr<Node> root;

    void insert(int val) {
        if (!root) {
            root = std::make_shared<Node>(val);
            return;
        }
        std::shared_ptr<Node> node = root;
        while (true) {
            std::shared_ptr<Node>& next = val < node->data ? node->left : node->right;
            if (!next) {
                next = std::make_shared<Node>(val);
                return;
            }
            node = next;
        }
    }

    void printInOrder() {
        _riri_print_in_order(root);
        std::cout << std::endl;
    }
};

struct BST : public BinaryTree {
    bool search(int val) {
        std::shared_ptr<Node> node = root;
        while (node) {
            if (node->data == val) return true;
            node = val < node->data ? node->left : node->right;
        }
        return false;
    }
};

struct AVL {
    std::shared_ptr<Node> root;

    static int height(std::shared_ptr<Node> n) { return n ? n->height : 0; }

    static void update(std::shared_ptr<Node> n) {
        n->height = 1 + std::max(height(n->left), height(n->right));
    }

    static int balance(std::shared_ptr<Node> n) {
        return n ? height(n->left) - height(n->right) : 0;
    }

    static std::shared_ptr<Node> rotateRight(std::shared_ptr<Node> y) {
        std::shared_ptr<Node> x = y->left;
        y->left = x->right;
        x->right = y;
        update(y);
        update(x);
        return x;
    }

    static std::shared_ptr<Node> rotateLeft(std::shared_ptr<Node> x) {
        std::shared_ptr<Node> y = x->right;
        x->right = y->left;
        y->left = x;
        update(x);
        update(y);
        return y;
    }

    static std::shared_ptr<Node> insertAt(std::shared_ptr<Node> node, int val) {
        if (!node) return std::make_shared<Node>(val);
        if (val < node->data) node->left = insertAt(node->left, val);
        else if (val > node->data) node->right = insertAt(node->right, val);
        else return node;

        update(node);
        int b = balance(node);
        if (b > 1 && val < node->left->data) return rotateRight(node);
        if (b < -1 && val > node->right->data) return rotateLeft(node);
        if (b > 1 && val > node->left->data) {
            node->left = rotateLeft(node->left);
            return rotateRight(node);
        }
        if (b < -1 && val < node->right->data) {
            node->right = rotateRight(node->right);
            return rotateLeft(node);
        }
        return node;
    }

    void insert(int val) { root = insertAt(root, val); }

    void printInOrder() {
        _riri_print_in_order(root);
        std::cout << std::endl;
    }
};

// Max-heap stored in an array; children of i are 2i+1 and 2i+2
struct Heap {
    std::vector<int> data;

    void siftUp(size_t i) {
        while (i > 0) {
            size_t parent = (i - 1) / 2;
            if (data[parent] >= data[i]) break;
            std::swap(data[parent], data[i]);
            i = parent;
        }
    }

    void sink(size_t i) {
        size_t n = data.size();
        while (2 * i + 1 < n) {
            size_t child = 2 * i + 1;
            if (child + 1 < n && data[child + 1] > data[child]) child++;
            if (data[i] >= data[child]) break;
            std::swap(data[i], data[child]);
            i = child;
        }
    }

    void push(int val) {
        data.push_back(val);
        siftUp(data.size() - 1);
    }

    int pop() {
        if (data.empty()) return -1;
        int top = data.front();
        data.front() = data.back();
        data.pop_back();
        if (!data.empty()) sink(0);
        return top;
    }

    int top() { return data.empty() ? -1 : data.front(); }

    int size() { return static_cast<int>(data.size()); }

    void print() {
        for (int v : data) std::cout << v << " ";
        std::cout << std::endl;
    }
};

struct Graph {
    std::map<int, std::vector<std::pair<int, int>>> adj;
    std::map<int, std::pair<int, int>> coords;

    void add_edge(int u, int v, int w) { adj[u].push_back({v, w}); }

    void set_pos(int u, int x, int y) { coords[u] = {x, y}; }

    std::vector<int> bfs(int start) {
        std::vector<int> order;
        std::queue<int> q;
        std::set<int> seen{start};
        q.push(start);
        while (!q.empty()) {
            int u = q.front();
            q.pop();
            order.push_back(u);
            for (auto& edge : adj[u]) {
                if (seen.insert(edge.first).second) q.push(edge.first);
            }
        }
        return order;
    }

    std::vector<int> dfs(int start) {
        std::vector<int> order;
        std::stack<int> s;
        std::set<int> seen;
        s.push(start);
        while (!s.empty()) {
            int u = s.top();
            s.pop();
            if (!seen.insert(u).second) continue;
            order.push_back(u);
            auto& neighbors = adj[u];
            for (auto it = neighbors.rbegin(); it != neighbors.rend(); ++it) {
                if (!seen.count(it->first)) s.push(it->first);
            }
        }
        return order;
    }

    double heuristic(int u, int v) {
        if (!coords.count(u) || !coords.count(v)) return 0;
        double dx = coords[u].first - coords[v].first;
        double dy = coords[u].second - coords[v].second;
        return std::sqrt(dx * dx + dy * dy);
    }

    std::vector<int> dijkstra(int start, int end) {
        return search(start, end, false);
    }

    std::vector<int> astar(int start, int end) {
        return search(start, end, true);
    }

    std::vector<int> search(int start, int end, bool guided) {
        using Entry = std::pair<double, int>;
        std::priority_queue<Entry, std::vector<Entry>, std::greater<Entry>> open;
        std::map<int, int> dist{{start, 0}};
        std::map<int, int> parent;
        open.push({guided ? heuristic(start, end) : 0.0, start});
        while (!open.empty()) {
            auto [priority, u] = open.top();
            open.pop();
            if (u == end) break;
            if (!guided && priority > dist[u]) continue;
            for (auto& [v, weight] : adj[u]) {
                int candidate = dist[u] + weight;
                if (!dist.count(v) || candidate < dist[v]) {
                    dist[v] = candidate;
                    parent[v] = u;
                    open.push({candidate + (guided ? heuristic(v, end) : 0.0), v});
                }
            }
        }
        std::vector<int> path;
        if (!dist.count(end)) return path;
        for (int at = end; at != start; at = parent[at]) path.push_back(at);
        path.push_back(start);
        std::reverse(path.begin(), path.end());
        return path;
    }
};

struct Regex {
    std::regex re;
    std::string pattern;

    explicit Regex(std::string p) : pattern(p) {
        try {
            re = std::regex(p);
        } catch (const std::regex_error& e) {
            std::cerr << "Regex error: " << e.what() << std::endl;
        }
    }

    bool match(std::string s) { return std::regex_search(s, re); }

    std::string replace(std::string s, std::string replacement) {
        return std::regex_replace(s, re, replacement);
    }
};
"""


def render_prelude(options: EmitOptions) -> str:
    """Assemble the prelude for the given target options."""
    parts: List[str] = [CORE_INCLUDES]
    if options.web_support:
        parts.append(WEB_INCLUDES)
    if options.gui_toolkit:
        parts.append(GUI_INCLUDES)
    if options.database_support:
        parts.append(DATABASE_INCLUDES)
        parts.append(DATABASE_HELPERS % {"database": DEFAULT_DATABASE})
    if options.web_support:
        parts.append(WEB_HELPERS)
    if options.gui_toolkit:
        parts.append(GUI_HELPERS)
    parts.append(CORE_HELPERS)
    parts.append(DATA_STRUCTURES)
    return "".join(parts)
